"""
Configuration Management for SparkStats

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables

Configuration precedence (highest to lowest):
1. Environment variables (SPARKSTATS_*)
2. Configuration file
3. Default values

Scoring weights (combat performance, behavior composites) are constants in
``sparkstats.core.constants`` and deliberately not configurable.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class AnalysisConfig:
    """Configuration for aggregation and insight generation."""

    # AIs need this many matches to join population min/max and percentiles
    min_matches_for_comparison: int = 5

    # Capsule distribution is truncated to the most used N capsules
    top_capsule_limit: int = 10

    # Build types / capsules need this many matches to be analysed for
    # behavioral impact (character-filtered data uses the smaller value)
    min_build_count: int = 3
    min_build_count_filtered: int = 1
    min_capsule_count: int = 2
    min_capsule_count_filtered: int = 1

    # Percent difference that makes a build/capsule action shift notable
    behavioral_impact_threshold_pct: float = 10.0


@dataclass
class ExportConfig:
    """Configuration for data export."""

    json_indent: int = 2
    csv_delimiter: str = ","


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None


@dataclass
class SparkStatsConfig:
    """Main configuration container."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    home = Path.home()
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))

    return [
        Path.cwd() / "sparkstats.yaml",
        Path.cwd() / "sparkstats.toml",
        Path.cwd() / "sparkstats.json",
        Path(xdg_config) / "sparkstats" / "config.yaml",
        home / ".sparkstats.yaml",
    ]


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    import yaml

    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    import tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    env_mappings = {
        "SPARKSTATS_LOG_LEVEL": ("logging", "level"),
        "SPARKSTATS_LOG_FILE": ("logging", "file"),
        "SPARKSTATS_MIN_MATCHES": ("analysis", "min_matches_for_comparison"),
        "SPARKSTATS_TOP_CAPSULES": ("analysis", "top_capsule_limit"),
        "SPARKSTATS_IMPACT_THRESHOLD": ("analysis", "behavioral_impact_threshold_pct"),
    }

    for env_var, (section, key) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        # Type conversion
        parsed: Any = value
        if value.lower() in ("true", "false"):
            parsed = value.lower() == "true"
        elif value.isdigit():
            parsed = int(value)
        else:
            try:
                parsed = float(value)
            except ValueError:
                pass

        config.setdefault(section, {})[key] = parsed

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> SparkStatsConfig:
    """Convert a dictionary to SparkStatsConfig, ignoring unknown keys."""
    config = SparkStatsConfig()

    for section in ("analysis", "export", "logging"):
        section_config = getattr(config, section)
        for key, value in (data.get(section) or {}).items():
            if hasattr(section_config, key):
                setattr(section_config, key, value)
            else:
                logger.debug(f"Ignoring unknown config key {section}.{key}")

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> SparkStatsConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged SparkStatsConfig
    """
    config_data: dict[str, Any] = {}

    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    if include_env:
        config_data = merge_configs(config_data, load_env_config())

    return dict_to_config(config_data)


def config_to_dict(config: SparkStatsConfig) -> dict[str, Any]:
    """Convert SparkStatsConfig to a dictionary."""
    return asdict(config)


def save_config(config: SparkStatsConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (format detected from extension)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        import yaml

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: SparkStatsConfig | None = None


def get_config() -> SparkStatsConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: SparkStatsConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None
