from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ModemState:
    tech: Optional[str] = None
    signal: Optional[int] = None


@dataclass(frozen=True)
class LocationFix:
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None
    satellites: Optional[int] = None
    hdop: Optional[float] = None


@dataclass(frozen=True)
class ModemReading:
    modem: ModemState = field(default_factory=ModemState)
    location: LocationFix = field(default_factory=LocationFix)


@dataclass(frozen=True)
class SystemState:
    watts: Optional[float] = None
    temperature: Optional[float] = None
    fan: Optional[float] = None
    load: Optional[float] = None


@dataclass(frozen=True)
class UpsState:
    voltage: Optional[float] = None
    capacity: Optional[float] = None


@dataclass(frozen=True)
class Snapshot:
    """One fully assembled telemetry record for a single publication cycle."""

    modem: ModemState = field(default_factory=ModemState)
    location: LocationFix = field(default_factory=LocationFix)
    system: SystemState = field(default_factory=SystemState)
    ups: UpsState = field(default_factory=UpsState)
    temp: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        """Wire mapping published as room metadata (without timestamp)."""
        return {
            "modem": {
                "tech": self.modem.tech,
                "signal": self.modem.signal,
            },
            "location": {
                "long": self.location.longitude,
                "lat": self.location.latitude,
                "alt": self.location.altitude,
                "speed": self.location.speed,
                "sat": self.location.satellites,
                "hdop": self.location.hdop,
            },
            "system": {
                "watts": self.system.watts,
                "temperature": self.system.temperature,
                "fan": self.system.fan,
                "load": self.system.load,
            },
            "ups": {
                "voltage": self.ups.voltage,
                "capacity": self.ups.capacity,
            },
            "temp": self.temp,
        }
