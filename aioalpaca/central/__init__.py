# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Central coordination of device state.

- config: CentralConfig and its builder
- event_bus: events and the bus that delivers them
- scheduler: the single poll loop of a store
- synchronizer: coalesced reads, failure policy and cache updates
- store: the device table all consumers read from
"""
