"""Tests for aioalpaca."""
