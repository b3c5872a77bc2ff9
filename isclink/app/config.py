# isclink/app/config.py
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from isclink.common.logging import DebugLevel, parse_debug_level
from isclink.core.errors import ConfigError


@dataclass(frozen=True)
class CommunicatorConfig:
    host: str = ""
    port: int = 0
    id: Optional[str] = None
    debug_level: DebugLevel = DebugLevel.DISABLED
    driver: str = "tcp"
    retry_delay_s: float = 2.5
    connect_timeout_s: float = 5.0
    buffer_size: int = 65535

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, source: str = "<mapping>") -> "CommunicatorConfig":
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                raise ConfigError(
                    f"Unknown config key '{key}'.",
                    hint=f"Valid keys: {sorted(known)}",
                    details={"source": source, "key": key},
                ) from None

        values: Dict[str, Any] = {}
        for name, value in data.items():
            try:
                values[name] = _cast(name, value)
            except (TypeError, ValueError) as e:
                raise ConfigError(
                    f"Invalid value for config key '{name}'.",
                    hint=str(e),
                    details={"source": source, "key": name, "value": value},
                ) from None

        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "CommunicatorConfig":
        """Return a copy with every non-None override applied (validated)."""
        present = {k: v for k, v in overrides.items() if v is not None}
        if not present:
            return self
        checked = CommunicatorConfig.from_mapping(present, source="overrides")
        return replace(self, **{k: getattr(checked, k) for k in present})


def _cast(name: str, value: Any) -> Any:
    if name in ("host", "driver"):
        if not isinstance(value, str):
            raise TypeError(f"Expected str, got {type(value).__name__}")
        return value.strip()

    if name == "id":
        if value is None:
            return None
        return str(value)

    if name == "port":
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"port {value} outside 0..65535")
        return value

    if name == "buffer_size":
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        if value <= 0:
            raise ValueError("buffer_size must be positive")
        return value

    if name in ("retry_delay_s", "connect_timeout_s"):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Expected float, got {type(value).__name__}")
        if value <= 0:
            raise ValueError(f"{name} must be positive")
        return float(value)

    if name == "debug_level":
        level = parse_debug_level(value)
        if level is None:
            raise ValueError(f"debug_level must be 0..3, got {value!r}")
        return level

    raise TypeError(f"Unhandled config key '{name}'")


def load_config(path: str | Path) -> CommunicatorConfig:
    """
    Load a communicator config from YAML.

    Accepts either a top-level `communicator:` mapping or a flat mapping.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(
            f"Missing config file: {path}",
            hint="Pass --config with an existing YAML file.",
            details={"path": str(path)},
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            "Failed to parse config file.",
            hint=str(e),
            details={"path": str(path)},
        ) from None

    if not isinstance(data, dict):
        raise ConfigError(
            "Config root must be a mapping.",
            details={"path": str(path)},
        )

    section = data.get("communicator", data)
    if not isinstance(section, dict):
        raise ConfigError(
            "'communicator' entry must be a mapping.",
            details={"path": str(path)},
        )

    return CommunicatorConfig.from_mapping(section, source=str(path))
