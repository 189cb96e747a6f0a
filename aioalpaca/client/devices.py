# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Typed clients of the ten Alpaca device types.

Every command maps one-to-one to a standard Alpaca member. Convenience
operations (nudging, relative moves, stepping through filters) only combine
standard reads and commands on the client side.
"""

from __future__ import annotations

import math
from typing import Any, Final

from aioalpaca import i18n
from aioalpaca.client.base import AlpacaClient
from aioalpaca.client.members import AlpacaProperty, as_bool, as_float, as_int, as_list, as_str
from aioalpaca.const import DeviceType
from aioalpaca.decorators import inspector
from aioalpaca.exceptions import ValidationException

# GuideDirections of the Alpaca standard
GUIDE_NORTH: Final = 0
GUIDE_SOUTH: Final = 1
GUIDE_EAST: Final = 2
GUIDE_WEST: Final = 3


def _check_finite(*, name: str, value: float) -> float:
    if not math.isfinite(value):
        raise ValidationException(i18n.tr("exception.support.value.not_finite", value=f"{name}={value}"))
    return value


class CameraClient(AlpacaClient):
    """Client of an Alpaca camera. Image download is not part of this client."""

    DEVICE_TYPE = DeviceType.CAMERA
    POLLED_PROPERTIES = (
        "camerastate",
        "ccdtemperature",
        "cooleron",
        "coolerpower",
        "imageready",
        "percentcompleted",
        "binx",
        "biny",
        "gain",
        "offset",
    )
    STATIC_PROPERTIES = (
        *AlpacaClient.STATIC_PROPERTIES,
        "canabortexposure",
        "canasymmetricbin",
        "canfastreadout",
        "cangetcoolerpower",
        "canpulseguide",
        "cansetccdtemperature",
        "canstopexposure",
        "cameraxsize",
        "cameraysize",
        "maxbinx",
        "maxbiny",
        "pixelsizex",
        "pixelsizey",
        "sensorname",
    )

    __slots__ = ()

    bayeroffsetx = AlpacaProperty("bayeroffsetx", as_int)
    bayeroffsety = AlpacaProperty("bayeroffsety", as_int)
    binx = AlpacaProperty("binx", as_int, param="BinX")
    biny = AlpacaProperty("biny", as_int, param="BinY")
    camerastate = AlpacaProperty("camerastate", as_int)
    cameraxsize = AlpacaProperty("cameraxsize", as_int)
    cameraysize = AlpacaProperty("cameraysize", as_int)
    canabortexposure = AlpacaProperty("canabortexposure", as_bool)
    canasymmetricbin = AlpacaProperty("canasymmetricbin", as_bool)
    canfastreadout = AlpacaProperty("canfastreadout", as_bool)
    cangetcoolerpower = AlpacaProperty("cangetcoolerpower", as_bool)
    canpulseguide = AlpacaProperty("canpulseguide", as_bool)
    cansetccdtemperature = AlpacaProperty("cansetccdtemperature", as_bool)
    canstopexposure = AlpacaProperty("canstopexposure", as_bool)
    ccdtemperature = AlpacaProperty("ccdtemperature", as_float)
    cooleron = AlpacaProperty("cooleron", as_bool, param="CoolerOn")
    coolerpower = AlpacaProperty("coolerpower", as_float)
    electronsperadu = AlpacaProperty("electronsperadu", as_float)
    exposuremax = AlpacaProperty("exposuremax", as_float)
    exposuremin = AlpacaProperty("exposuremin", as_float)
    exposureresolution = AlpacaProperty("exposureresolution", as_float)
    fastreadout = AlpacaProperty("fastreadout", as_bool, param="FastReadout")
    fullwellcapacity = AlpacaProperty("fullwellcapacity", as_float)
    gain = AlpacaProperty("gain", as_int, param="Gain")
    gainmax = AlpacaProperty("gainmax", as_int)
    gainmin = AlpacaProperty("gainmin", as_int)
    gains = AlpacaProperty("gains", as_list)
    hasshutter = AlpacaProperty("hasshutter", as_bool)
    heatsinktemperature = AlpacaProperty("heatsinktemperature", as_float)
    imageready = AlpacaProperty("imageready", as_bool)
    ispulseguiding = AlpacaProperty("ispulseguiding", as_bool)
    lastexposureduration = AlpacaProperty("lastexposureduration", as_float)
    lastexposurestarttime = AlpacaProperty("lastexposurestarttime", as_str)
    maxadu = AlpacaProperty("maxadu", as_int)
    maxbinx = AlpacaProperty("maxbinx", as_int)
    maxbiny = AlpacaProperty("maxbiny", as_int)
    numx = AlpacaProperty("numx", as_int, param="NumX")
    numy = AlpacaProperty("numy", as_int, param="NumY")
    offset = AlpacaProperty("offset", as_int, param="Offset")
    offsetmax = AlpacaProperty("offsetmax", as_int)
    offsetmin = AlpacaProperty("offsetmin", as_int)
    offsets = AlpacaProperty("offsets", as_list)
    percentcompleted = AlpacaProperty("percentcompleted", as_int)
    pixelsizex = AlpacaProperty("pixelsizex", as_float)
    pixelsizey = AlpacaProperty("pixelsizey", as_float)
    readoutmode = AlpacaProperty("readoutmode", as_int, param="ReadoutMode")
    readoutmodes = AlpacaProperty("readoutmodes", as_list)
    sensorname = AlpacaProperty("sensorname", as_str)
    sensortype = AlpacaProperty("sensortype", as_int)
    setccdtemperature = AlpacaProperty("setccdtemperature", as_float, param="SetCCDTemperature")
    startx = AlpacaProperty("startx", as_int, param="StartX")
    starty = AlpacaProperty("starty", as_int, param="StartY")
    subexposureduration = AlpacaProperty("subexposureduration", as_float, param="SubExposureDuration")

    @inspector()
    async def abort_exposure(self) -> None:
        """Abort the current exposure and discard the image."""
        await self._command(action="abortexposure")

    @inspector()
    async def pulse_guide(self, *, direction: int, duration: int) -> None:
        """Pulse guide in a direction for duration milliseconds."""
        await self._command(action="pulseguide", params={"Direction": direction, "Duration": duration})

    @inspector()
    async def start_exposure(self, *, duration: float, light: bool = True) -> None:
        """Start an exposure of duration seconds."""
        if duration < 0:
            raise ValidationException(i18n.tr("exception.client.camera.negative_duration", duration=duration))
        await self._command(
            action="startexposure",
            params={"Duration": _check_finite(name="Duration", value=duration), "Light": light},
        )

    @inspector()
    async def stop_exposure(self) -> None:
        """Stop the current exposure early and keep the image."""
        await self._command(action="stopexposure")

    @inspector()
    async def set_binning(self, *, binx: int, biny: int | None = None) -> None:
        """Set both binning axes, symmetric if biny is omitted."""
        await self.binx.set(binx)
        await self.biny.set(binx if biny is None else biny)

    @inspector()
    async def set_subframe(self, *, startx: int, starty: int, numx: int, numy: int) -> None:
        """Set the readout subframe in binned pixels."""
        await self.startx.set(startx)
        await self.starty.set(starty)
        await self.numx.set(numx)
        await self.numy.set(numy)


class CoverCalibratorClient(AlpacaClient):
    """Client of an Alpaca cover calibrator."""

    DEVICE_TYPE = DeviceType.COVER_CALIBRATOR
    POLLED_PROPERTIES = ("brightness", "calibratorstate", "coverstate")
    STATIC_PROPERTIES = (*AlpacaClient.STATIC_PROPERTIES, "maxbrightness")

    __slots__ = ()

    brightness = AlpacaProperty("brightness", as_int)
    calibratorchanging = AlpacaProperty("calibratorchanging", as_bool)
    calibratorstate = AlpacaProperty("calibratorstate", as_int)
    covermoving = AlpacaProperty("covermoving", as_bool)
    coverstate = AlpacaProperty("coverstate", as_int)
    maxbrightness = AlpacaProperty("maxbrightness", as_int)

    @inspector()
    async def calibrator_off(self) -> None:
        """Turn the calibrator off."""
        await self._command(action="calibratoroff")

    @inspector()
    async def calibrator_on(self, *, brightness: int) -> None:
        """Turn the calibrator on at brightness."""
        await self._command(action="calibratoron", params={"Brightness": brightness})

    @inspector()
    async def close_cover(self) -> None:
        """Close the cover."""
        await self._command(action="closecover")

    @inspector()
    async def halt_cover(self) -> None:
        """Stop cover movement."""
        await self._command(action="haltcover")

    @inspector()
    async def open_cover(self) -> None:
        """Open the cover."""
        await self._command(action="opencover")


class DomeClient(AlpacaClient):
    """Client of an Alpaca dome."""

    DEVICE_TYPE = DeviceType.DOME
    POLLED_PROPERTIES = ("altitude", "athome", "atpark", "azimuth", "shutterstatus", "slaved", "slewing")
    STATIC_PROPERTIES = (
        *AlpacaClient.STATIC_PROPERTIES,
        "canfindhome",
        "canpark",
        "cansetaltitude",
        "cansetazimuth",
        "cansetpark",
        "cansetshutter",
        "canslave",
        "cansyncazimuth",
    )

    __slots__ = ()

    altitude = AlpacaProperty("altitude", as_float)
    athome = AlpacaProperty("athome", as_bool)
    atpark = AlpacaProperty("atpark", as_bool)
    azimuth = AlpacaProperty("azimuth", as_float)
    canfindhome = AlpacaProperty("canfindhome", as_bool)
    canpark = AlpacaProperty("canpark", as_bool)
    cansetaltitude = AlpacaProperty("cansetaltitude", as_bool)
    cansetazimuth = AlpacaProperty("cansetazimuth", as_bool)
    cansetpark = AlpacaProperty("cansetpark", as_bool)
    cansetshutter = AlpacaProperty("cansetshutter", as_bool)
    canslave = AlpacaProperty("canslave", as_bool)
    cansyncazimuth = AlpacaProperty("cansyncazimuth", as_bool)
    shutterstatus = AlpacaProperty("shutterstatus", as_int)
    slaved = AlpacaProperty("slaved", as_bool, param="Slaved")
    slewing = AlpacaProperty("slewing", as_bool)

    @inspector()
    async def abort_slew(self) -> None:
        """Stop any dome movement."""
        await self._command(action="abortslew")

    @inspector()
    async def close_shutter(self) -> None:
        """Close the shutter."""
        await self._command(action="closeshutter")

    @inspector()
    async def find_home(self) -> None:
        """Move the dome to its home position."""
        await self._command(action="findhome")

    @inspector()
    async def open_shutter(self) -> None:
        """Open the shutter."""
        await self._command(action="openshutter")

    @inspector()
    async def park(self) -> None:
        """Park the dome."""
        await self._command(action="park")

    @inspector()
    async def set_park(self) -> None:
        """Store the current azimuth as park position."""
        await self._command(action="setpark")

    @inspector()
    async def slew_to_altitude(self, *, altitude: float) -> None:
        """Slew the shutter opening to altitude degrees."""
        await self._command(action="slewtoaltitude", params={"Altitude": _check_finite(name="Altitude", value=altitude)})

    @inspector()
    async def slew_to_azimuth(self, *, azimuth: float) -> None:
        """Slew the dome to azimuth degrees."""
        await self._command(action="slewtoazimuth", params={"Azimuth": _check_finite(name="Azimuth", value=azimuth)})

    @inspector()
    async def sync_to_azimuth(self, *, azimuth: float) -> None:
        """Declare the current dome position to be azimuth degrees."""
        await self._command(action="synctoazimuth", params={"Azimuth": _check_finite(name="Azimuth", value=azimuth)})

    @inspector()
    async def nudge_azimuth(self, *, degrees: float) -> float:
        """Slew relative to the current azimuth. Return the target azimuth."""
        target = (await self.azimuth.get() + degrees) % 360.0
        await self.slew_to_azimuth(azimuth=target)
        return target


class FilterWheelClient(AlpacaClient):
    """Client of an Alpaca filter wheel. Position -1 means the wheel is moving."""

    DEVICE_TYPE = DeviceType.FILTER_WHEEL
    POLLED_PROPERTIES = ("position",)
    STATIC_PROPERTIES = (*AlpacaClient.STATIC_PROPERTIES, "names", "focusoffsets")

    __slots__ = ()

    focusoffsets = AlpacaProperty("focusoffsets", as_list)
    names = AlpacaProperty("names", as_list)
    position = AlpacaProperty("position", as_int, param="Position")

    async def _step(self, *, step: int) -> int:
        slots = len(await self.names.get())
        if slots == 0:
            raise ValidationException(i18n.tr("exception.client.filterwheel.no_filters", device_id=self.device_id))
        if (current := await self.position.get()) < 0:
            current = 0
        target = (current + step) % slots
        await self.position.set(target)
        return target

    @inspector()
    async def next_filter(self) -> int:
        """Move to the next filter slot, wrapping around. Return the target slot."""
        return await self._step(step=1)

    @inspector()
    async def previous_filter(self) -> int:
        """Move to the previous filter slot, wrapping around. Return the target slot."""
        return await self._step(step=-1)


class FocuserClient(AlpacaClient):
    """Client of an Alpaca focuser."""

    DEVICE_TYPE = DeviceType.FOCUSER
    POLLED_PROPERTIES = ("ismoving", "position", "temperature", "tempcomp")
    STATIC_PROPERTIES = (
        *AlpacaClient.STATIC_PROPERTIES,
        "absolute",
        "maxincrement",
        "maxstep",
        "stepsize",
        "tempcompavailable",
    )

    __slots__ = ()

    absolute = AlpacaProperty("absolute", as_bool)
    ismoving = AlpacaProperty("ismoving", as_bool)
    maxincrement = AlpacaProperty("maxincrement", as_int)
    maxstep = AlpacaProperty("maxstep", as_int)
    position = AlpacaProperty("position", as_int)
    stepsize = AlpacaProperty("stepsize", as_float)
    tempcomp = AlpacaProperty("tempcomp", as_bool, param="TempComp")
    tempcompavailable = AlpacaProperty("tempcompavailable", as_bool)
    temperature = AlpacaProperty("temperature", as_float)

    @inspector()
    async def halt(self) -> None:
        """Stop the focuser."""
        await self._command(action="halt")

    @inspector()
    async def move(self, *, position: int) -> None:
        """Move to an absolute step position, or by steps on a relative focuser."""
        await self._command(action="move", params={"Position": position})

    @inspector()
    async def move_relative(self, *, steps: int) -> int:
        """
        Move by steps from the current position.

        On an absolute focuser the target is clamped to 0..maxstep, a relative
        focuser receives the step count itself. Return the value sent.
        """
        if not await self.absolute.get():
            await self.move(position=steps)
            return steps
        target = min(max(await self.position.get() + steps, 0), await self.maxstep.get())
        await self.move(position=target)
        return target


class ObservingConditionsClient(AlpacaClient):
    """Client of an Alpaca weather station."""

    DEVICE_TYPE = DeviceType.OBSERVING_CONDITIONS
    POLLED_PROPERTIES = (
        "cloudcover",
        "dewpoint",
        "humidity",
        "pressure",
        "rainrate",
        "skybrightness",
        "skyquality",
        "skytemperature",
        "starfwhm",
        "temperature",
        "winddirection",
        "windgust",
        "windspeed",
    )
    STATIC_PROPERTIES = (*AlpacaClient.STATIC_PROPERTIES, "averageperiod")

    __slots__ = ()

    averageperiod = AlpacaProperty("averageperiod", as_float, param="AveragePeriod")
    cloudcover = AlpacaProperty("cloudcover", as_float)
    dewpoint = AlpacaProperty("dewpoint", as_float)
    humidity = AlpacaProperty("humidity", as_float)
    pressure = AlpacaProperty("pressure", as_float)
    rainrate = AlpacaProperty("rainrate", as_float)
    skybrightness = AlpacaProperty("skybrightness", as_float)
    skyquality = AlpacaProperty("skyquality", as_float)
    skytemperature = AlpacaProperty("skytemperature", as_float)
    starfwhm = AlpacaProperty("starfwhm", as_float)
    temperature = AlpacaProperty("temperature", as_float)
    winddirection = AlpacaProperty("winddirection", as_float)
    windgust = AlpacaProperty("windgust", as_float)
    windspeed = AlpacaProperty("windspeed", as_float)

    @inspector()
    async def refresh(self) -> None:
        """Ask the station to refresh its sensor values."""
        await self._command(action="refresh")

    async def sensor_description(self, *, sensor_name: str) -> str:
        """Return the description of a sensor."""
        return as_str(await self._query(action="sensordescription", params={"SensorName": sensor_name}))

    async def time_since_last_update(self, *, sensor_name: str = "") -> float:
        """Return the seconds since the last update of a sensor, or of any sensor for an empty name."""
        return as_float(await self._query(action="timesincelastupdate", params={"SensorName": sensor_name}))


class RotatorClient(AlpacaClient):
    """Client of an Alpaca rotator."""

    DEVICE_TYPE = DeviceType.ROTATOR
    POLLED_PROPERTIES = ("ismoving", "mechanicalposition", "position", "targetposition")
    STATIC_PROPERTIES = (*AlpacaClient.STATIC_PROPERTIES, "canreverse", "stepsize")

    __slots__ = ()

    canreverse = AlpacaProperty("canreverse", as_bool)
    ismoving = AlpacaProperty("ismoving", as_bool)
    mechanicalposition = AlpacaProperty("mechanicalposition", as_float)
    position = AlpacaProperty("position", as_float)
    reverse = AlpacaProperty("reverse", as_bool, param="Reverse")
    stepsize = AlpacaProperty("stepsize", as_float)
    targetposition = AlpacaProperty("targetposition", as_float)

    @inspector()
    async def halt(self) -> None:
        """Stop the rotator."""
        await self._command(action="halt")

    @inspector()
    async def move(self, *, position: float) -> None:
        """Rotate by position degrees relative to the current position."""
        await self._command(action="move", params={"Position": _check_finite(name="Position", value=position)})

    @inspector()
    async def move_absolute(self, *, position: float) -> None:
        """Rotate to a sky position angle."""
        await self._command(
            action="moveabsolute", params={"Position": _check_finite(name="Position", value=position)}
        )

    @inspector()
    async def move_mechanical(self, *, position: float) -> None:
        """Rotate to a mechanical position angle."""
        await self._command(
            action="movemechanical", params={"Position": _check_finite(name="Position", value=position)}
        )

    @inspector()
    async def sync(self, *, position: float) -> None:
        """Declare the current sky position angle to be position."""
        await self._command(action="sync", params={"Position": _check_finite(name="Position", value=position)})


class SafetyMonitorClient(AlpacaClient):
    """Client of an Alpaca safety monitor."""

    DEVICE_TYPE = DeviceType.SAFETY_MONITOR
    POLLED_PROPERTIES = ("issafe",)

    __slots__ = ()

    issafe = AlpacaProperty("issafe", as_bool)


class SwitchClient(AlpacaClient):
    """
    Client of an Alpaca switch device.

    Apart from maxswitch all members are indexed by switch id and are read
    through dedicated methods instead of the poll loop.
    """

    DEVICE_TYPE = DeviceType.SWITCH
    STATIC_PROPERTIES = (*AlpacaClient.STATIC_PROPERTIES, "maxswitch")

    __slots__ = ()

    maxswitch = AlpacaProperty("maxswitch", as_int)

    async def _indexed(self, *, action: str, switch_id: int) -> Any:
        return await self._query(action=action, params={"Id": switch_id})

    async def can_write(self, *, switch_id: int) -> bool:
        """Return True if the switch can be written."""
        return as_bool(await self._indexed(action="canwrite", switch_id=switch_id))

    async def get_switch(self, *, switch_id: int) -> bool:
        """Return the boolean state of a switch."""
        return as_bool(await self._indexed(action="getswitch", switch_id=switch_id))

    async def get_switch_description(self, *, switch_id: int) -> str:
        """Return the description of a switch."""
        return as_str(await self._indexed(action="getswitchdescription", switch_id=switch_id))

    async def get_switch_name(self, *, switch_id: int) -> str:
        """Return the name of a switch."""
        return as_str(await self._indexed(action="getswitchname", switch_id=switch_id))

    async def get_switch_value(self, *, switch_id: int) -> float:
        """Return the value of a switch."""
        return as_float(await self._indexed(action="getswitchvalue", switch_id=switch_id))

    async def min_switch_value(self, *, switch_id: int) -> float:
        """Return the minimum value of a switch."""
        return as_float(await self._indexed(action="minswitchvalue", switch_id=switch_id))

    async def max_switch_value(self, *, switch_id: int) -> float:
        """Return the maximum value of a switch."""
        return as_float(await self._indexed(action="maxswitchvalue", switch_id=switch_id))

    async def switch_step(self, *, switch_id: int) -> float:
        """Return the step size of a switch."""
        return as_float(await self._indexed(action="switchstep", switch_id=switch_id))

    @inspector()
    async def set_switch(self, *, switch_id: int, state: bool) -> None:
        """Set the boolean state of a switch."""
        await self._command(action="setswitch", params={"Id": switch_id, "State": state})

    @inspector()
    async def set_switch_name(self, *, switch_id: int, name: str) -> None:
        """Rename a switch."""
        await self._command(action="setswitchname", params={"Id": switch_id, "Name": name})

    @inspector()
    async def set_switch_value(self, *, switch_id: int, value: float) -> None:
        """Set the value of a switch."""
        await self._command(
            action="setswitchvalue", params={"Id": switch_id, "Value": _check_finite(name="Value", value=value)}
        )

    async def get_switch_details(self, *, switch_id: int) -> dict[str, Any]:
        """Return name, description, limits and current value of a switch."""
        return {
            "name": await self.get_switch_name(switch_id=switch_id),
            "description": await self.get_switch_description(switch_id=switch_id),
            "can_write": await self.can_write(switch_id=switch_id),
            "min": await self.min_switch_value(switch_id=switch_id),
            "max": await self.max_switch_value(switch_id=switch_id),
            "step": await self.switch_step(switch_id=switch_id),
            "value": await self.get_switch_value(switch_id=switch_id),
        }


class TelescopeClient(AlpacaClient):
    """Client of an Alpaca telescope mount."""

    DEVICE_TYPE = DeviceType.TELESCOPE
    POLLED_PROPERTIES = (
        "altitude",
        "athome",
        "atpark",
        "azimuth",
        "declination",
        "ispulseguiding",
        "rightascension",
        "sideofpier",
        "siderealtime",
        "slewing",
        "tracking",
        "utcdate",
    )
    STATIC_PROPERTIES = (
        *AlpacaClient.STATIC_PROPERTIES,
        "alignmentmode",
        "canfindhome",
        "canpark",
        "canpulseguide",
        "cansetdeclinationrate",
        "cansetguiderates",
        "cansetpark",
        "cansetpierside",
        "cansetrightascensionrate",
        "cansettracking",
        "canslew",
        "canslewaltaz",
        "canslewaltazasync",
        "canslewasync",
        "cansync",
        "cansyncaltaz",
        "canunpark",
        "equatorialsystem",
        "sitelatitude",
        "sitelongitude",
        "siteelevation",
    )

    __slots__ = ()

    alignmentmode = AlpacaProperty("alignmentmode", as_int)
    altitude = AlpacaProperty("altitude", as_float)
    aperturearea = AlpacaProperty("aperturearea", as_float)
    aperturediameter = AlpacaProperty("aperturediameter", as_float)
    athome = AlpacaProperty("athome", as_bool)
    atpark = AlpacaProperty("atpark", as_bool)
    azimuth = AlpacaProperty("azimuth", as_float)
    canfindhome = AlpacaProperty("canfindhome", as_bool)
    canpark = AlpacaProperty("canpark", as_bool)
    canpulseguide = AlpacaProperty("canpulseguide", as_bool)
    cansetdeclinationrate = AlpacaProperty("cansetdeclinationrate", as_bool)
    cansetguiderates = AlpacaProperty("cansetguiderates", as_bool)
    cansetpark = AlpacaProperty("cansetpark", as_bool)
    cansetpierside = AlpacaProperty("cansetpierside", as_bool)
    cansetrightascensionrate = AlpacaProperty("cansetrightascensionrate", as_bool)
    cansettracking = AlpacaProperty("cansettracking", as_bool)
    canslew = AlpacaProperty("canslew", as_bool)
    canslewaltaz = AlpacaProperty("canslewaltaz", as_bool)
    canslewaltazasync = AlpacaProperty("canslewaltazasync", as_bool)
    canslewasync = AlpacaProperty("canslewasync", as_bool)
    cansync = AlpacaProperty("cansync", as_bool)
    cansyncaltaz = AlpacaProperty("cansyncaltaz", as_bool)
    canunpark = AlpacaProperty("canunpark", as_bool)
    declination = AlpacaProperty("declination", as_float)
    declinationrate = AlpacaProperty("declinationrate", as_float, param="DeclinationRate")
    doesrefraction = AlpacaProperty("doesrefraction", as_bool, param="DoesRefraction")
    equatorialsystem = AlpacaProperty("equatorialsystem", as_int)
    focallength = AlpacaProperty("focallength", as_float)
    guideratedeclination = AlpacaProperty("guideratedeclination", as_float, param="GuideRateDeclination")
    guideraterightascension = AlpacaProperty("guideraterightascension", as_float, param="GuideRateRightAscension")
    ispulseguiding = AlpacaProperty("ispulseguiding", as_bool)
    rightascension = AlpacaProperty("rightascension", as_float)
    rightascensionrate = AlpacaProperty("rightascensionrate", as_float, param="RightAscensionRate")
    sideofpier = AlpacaProperty("sideofpier", as_int, param="SideOfPier")
    siderealtime = AlpacaProperty("siderealtime", as_float)
    siteelevation = AlpacaProperty("siteelevation", as_float, param="SiteElevation")
    sitelatitude = AlpacaProperty("sitelatitude", as_float, param="SiteLatitude")
    sitelongitude = AlpacaProperty("sitelongitude", as_float, param="SiteLongitude")
    slewing = AlpacaProperty("slewing", as_bool)
    slewsettletime = AlpacaProperty("slewsettletime", as_int, param="SlewSettleTime")
    targetdeclination = AlpacaProperty("targetdeclination", as_float, param="TargetDeclination")
    targetrightascension = AlpacaProperty("targetrightascension", as_float, param="TargetRightAscension")
    tracking = AlpacaProperty("tracking", as_bool, param="Tracking")
    trackingrate = AlpacaProperty("trackingrate", as_int, param="TrackingRate")
    trackingrates = AlpacaProperty("trackingrates", as_list)
    utcdate = AlpacaProperty("utcdate", as_str, param="UTCDate")

    async def axis_rates(self, *, axis: int) -> list[Any]:
        """Return the rate ranges supported by move_axis for an axis."""
        return as_list(await self._query(action="axisrates", params={"Axis": axis}))

    async def can_move_axis(self, *, axis: int) -> bool:
        """Return True if move_axis is supported for an axis."""
        return as_bool(await self._query(action="canmoveaxis", params={"Axis": axis}))

    async def destination_side_of_pier(self, *, right_ascension: float, declination: float) -> int:
        """Return the pier side after a slew to the given coordinates."""
        return as_int(
            await self._query(
                action="destinationsideofpier",
                params={"RightAscension": right_ascension, "Declination": declination},
            )
        )

    @inspector()
    async def abort_slew(self) -> None:
        """Stop any slew."""
        await self._command(action="abortslew")

    @inspector()
    async def find_home(self) -> None:
        """Move the mount to its home position."""
        await self._command(action="findhome")

    @inspector()
    async def move_axis(self, *, axis: int, rate: float) -> None:
        """Move an axis at rate degrees per second. Rate 0 stops the axis."""
        await self._command(action="moveaxis", params={"Axis": axis, "Rate": _check_finite(name="Rate", value=rate)})

    @inspector()
    async def park(self) -> None:
        """Park the mount."""
        await self._command(action="park")

    @inspector()
    async def pulse_guide(self, *, direction: int, duration: int) -> None:
        """Pulse guide in a direction for duration milliseconds."""
        await self._command(action="pulseguide", params={"Direction": direction, "Duration": duration})

    @inspector()
    async def set_park(self) -> None:
        """Store the current position as park position."""
        await self._command(action="setpark")

    @inspector()
    async def slew_to_alt_az(self, *, azimuth: float, altitude: float) -> None:
        """Slew synchronously to horizontal coordinates."""
        await self._command(action="slewtoaltaz", params={"Azimuth": azimuth, "Altitude": altitude})

    @inspector()
    async def slew_to_alt_az_async(self, *, azimuth: float, altitude: float) -> None:
        """Start a slew to horizontal coordinates."""
        await self._command(action="slewtoaltazasync", params={"Azimuth": azimuth, "Altitude": altitude})

    @inspector()
    async def slew_to_coordinates(self, *, right_ascension: float, declination: float) -> None:
        """Slew synchronously to equatorial coordinates."""
        await self._command(
            action="slewtocoordinates",
            params={"RightAscension": right_ascension, "Declination": declination},
        )

    @inspector()
    async def slew_to_coordinates_async(self, *, right_ascension: float, declination: float) -> None:
        """Start a slew to equatorial coordinates."""
        await self._command(
            action="slewtocoordinatesasync",
            params={"RightAscension": right_ascension, "Declination": declination},
        )

    @inspector()
    async def slew_to_target(self) -> None:
        """Slew synchronously to the target coordinates."""
        await self._command(action="slewtotarget")

    @inspector()
    async def slew_to_target_async(self) -> None:
        """Start a slew to the target coordinates."""
        await self._command(action="slewtotargetasync")

    @inspector()
    async def sync_to_alt_az(self, *, azimuth: float, altitude: float) -> None:
        """Sync the mount to horizontal coordinates."""
        await self._command(action="synctoaltaz", params={"Azimuth": azimuth, "Altitude": altitude})

    @inspector()
    async def sync_to_coordinates(self, *, right_ascension: float, declination: float) -> None:
        """Sync the mount to equatorial coordinates."""
        await self._command(
            action="synctocoordinates",
            params={"RightAscension": right_ascension, "Declination": declination},
        )

    @inspector()
    async def sync_to_target(self) -> None:
        """Sync the mount to the target coordinates."""
        await self._command(action="synctotarget")

    @inspector()
    async def unpark(self) -> None:
        """Unpark the mount."""
        await self._command(action="unpark")

    @inspector()
    async def nudge(self, *, direction: int, arcminutes: float) -> tuple[float, float]:
        """
        Move the mount a small step in a guide direction.

        Reads the current coordinates, offsets them and starts an
        asynchronous slew. Return the target (right ascension, declination).
        """
        right_ascension = await self.rightascension.get()
        declination = await self.declination.get()
        degrees = arcminutes / 60.0
        if direction == GUIDE_NORTH:
            declination = min(declination + degrees, 90.0)
        elif direction == GUIDE_SOUTH:
            declination = max(declination - degrees, -90.0)
        elif direction in (GUIDE_EAST, GUIDE_WEST):
            hours = degrees / 15.0
            right_ascension = (right_ascension + (hours if direction == GUIDE_EAST else -hours)) % 24.0
        else:
            raise ValidationException(i18n.tr("exception.client.telescope.invalid_direction", direction=direction))
        await self.slew_to_coordinates_async(right_ascension=right_ascension, declination=declination)
        return right_ascension, declination
