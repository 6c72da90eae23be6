"""Configuration loading for report factories (factory_config.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = "factory_config.yml"

DEFAULT_REPORT_SOURCES = "report_sources"
DEFAULT_OUTPUTS = "outputs"
DEFAULT_REPORT_EXTENSIONS = (".qmd", ".rmd")
DEFAULT_ENGINE_COMMAND = (
    "quarto",
    "render",
    "{input}",
    "--output-dir",
    "{output_dir}",
    "-M",
    "output-file:{output_name}",
)
DEFAULT_TIMEOUT = 3600.0

ON_ERROR_POLICIES = ("abort", "continue")


@dataclass
class EngineConfig:
    """External rendering engine invocation settings."""

    command: List[str] = field(default_factory=lambda: list(DEFAULT_ENGINE_COMMAND))
    quiet_flag: Optional[str] = "--quiet"
    timeout: Optional[float] = DEFAULT_TIMEOUT

    @property
    def executable(self) -> str:
        return self.command[0]


@dataclass
class FactoryConfig:
    """Represents the settings defined in factory_config.yml."""

    root: Path
    name: Optional[str] = None
    report_sources: str = DEFAULT_REPORT_SOURCES
    outputs: str = DEFAULT_OUTPUTS
    report_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_REPORT_EXTENSIONS))
    on_error: str = "abort"
    engine: EngineConfig = field(default_factory=EngineConfig)


def load_config(config_path: Path) -> FactoryConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return FactoryConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = FactoryConfig(root=root, name=_as_str(data.get("name")))
    config.report_sources = _as_str(data.get("report_sources")) or DEFAULT_REPORT_SOURCES
    config.outputs = _as_str(data.get("outputs")) or DEFAULT_OUTPUTS

    extensions = _as_str_list(data.get("report_extensions"))
    if extensions:
        config.report_extensions = [_normalize_extension(ext) for ext in extensions]

    on_error = _as_str(data.get("on_error"))
    if on_error is not None:
        config.on_error = validate_on_error(on_error)

    engine_data = _as_dict(data.get("engine"))
    if engine_data:
        command = _as_str_list(engine_data.get("command"))
        if command:
            config.engine.command = command
        if "quiet_flag" in engine_data:
            config.engine.quiet_flag = _as_str(engine_data.get("quiet_flag")) or None
        if "timeout" in engine_data:
            timeout = _as_float(engine_data.get("timeout"))
            config.engine.timeout = timeout if timeout else None

    return config


def dump_config(config: FactoryConfig) -> str:
    """Serialize the portable parts of a configuration back to YAML."""
    payload: Dict[str, Any] = {}
    if config.name:
        payload["name"] = config.name
    payload["report_sources"] = config.report_sources
    payload["outputs"] = config.outputs
    return yaml.safe_dump(payload, sort_keys=False)


def validate_on_error(value: str) -> str:
    lowered = value.strip().lower()
    if lowered not in ON_ERROR_POLICIES:
        allowed = ", ".join(ON_ERROR_POLICIES)
        raise ConfigError(f"on_error must be one of {allowed}; got '{value}'")
    return lowered


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _normalize_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
