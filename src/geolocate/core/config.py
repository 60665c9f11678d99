from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
import json
import os

from loguru import logger

from geolocate.core.models import LatLong
from geolocate.util.errors import ConfigurationError
from geolocate.util.platform import hide_file

CONFIG_FILENAME = ".geolocate.json"

# Attribute name -> key in the JSON document.
JSON_KEYS = {
    "exiftool_path": "exiftoolPath",
    "convert_path": "convertPath",
    "last_image_path": "lastImagePath",
    "maps_api_key": "mapsApiKey",
    "last_position": "lastPosition",
}

def config_path() -> Path:
    return Path.home() / CONFIG_FILENAME

@dataclass
class MapSetup:
    latitude: float | None = None
    longitude: float | None = None
    zoom: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "MapSetup":
        values = {}
        for name in ("latitude", "longitude"):
            v = data.get(name)
            if v is not None and (isinstance(v, bool) or not isinstance(v, (int, float))):
                raise ConfigurationError(f"Invalid value for lastPosition.{name}: {v!r}")
            values[name] = None if v is None else float(v)
        zoom = data.get("zoom")
        if zoom is not None and (isinstance(zoom, bool) or not isinstance(zoom, int)):
            raise ConfigurationError(f"Invalid value for lastPosition.zoom: {zoom!r}")
        values["zoom"] = zoom
        return cls(**values)

@dataclass
class Configuration:
    """User configuration, loaded at startup and saved at shutdown.

    Stored in: ~/.geolocate.json (hidden on Windows)
    """
    exiftool_path: str = ""
    convert_path: str = ""
    last_image_path: str = ""
    maps_api_key: str = ""
    last_position: MapSetup | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Configuration":
        """Build from the JSON document; unknown keys are ignored."""
        values = {}
        for f in fields(cls):
            if f.name == "last_position":
                continue
            v = data.get(JSON_KEYS[f.name])
            if v is not None and not isinstance(v, str):
                raise ConfigurationError(f"Invalid value for {JSON_KEYS[f.name]}: {v!r}")
            values[f.name] = v or ""
        pos = data.get(JSON_KEYS["last_position"])
        if pos is not None:
            if not isinstance(pos, dict):
                raise ConfigurationError("Invalid value for lastPosition")
            values["last_position"] = MapSetup.from_dict(pos)
        return cls(**values)

    def to_dict(self) -> dict:
        return {JSON_KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def load(cls, path: Path | None = None) -> "Configuration":
        p = path or config_path()
        if not p.exists():
            return cls()
        if not p.is_file():
            raise ConfigurationError(f"Could not read configuration file {p}")
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise ConfigurationError(f"Could not read configuration file {p}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Could not read configuration file {p}")
        logger.debug("Loaded configuration from {}", p)
        return cls.from_dict(data)

    def save(self, path: Path | None = None) -> None:
        p = path or config_path()
        if p.exists() and not (p.is_file() and os.access(p, os.W_OK)):
            raise ConfigurationError(f"Could not write configuration file {p}")
        try:
            p.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Could not write configuration file {p}") from e
        hide_file(p)
        logger.debug("Saved configuration to {}", p)

    def last_geolocation(self) -> LatLong | None:
        pos = self.last_position
        if pos is None or pos.latitude is None or pos.longitude is None:
            return None
        return LatLong(float(pos.latitude), float(pos.longitude))

    def remember_position(self, geolocation: LatLong, zoom: int | None = None) -> None:
        if self.last_position is None:
            self.last_position = MapSetup()
        self.last_position.latitude = geolocation.latitude
        self.last_position.longitude = geolocation.longitude
        if zoom is not None:
            self.last_position.zoom = zoom
