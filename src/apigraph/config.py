"""Configuration management for apigraph using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".apigraph.json"


class HttpMethod(str, Enum):
    """HTTP methods that produce operation nodes."""
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    PATCH = "PATCH"
    TRACE = "TRACE"


class LayoutDirection(str, Enum):
    """Rank direction handed to the layout engine."""
    LEFT_RIGHT = "LR"
    TOP_BOTTOM = "TB"


class OutputFormat(str, Enum):
    """Output format types."""
    JSON = "json"
    MERMAID = "mermaid"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class CompilerConfig(BaseModel):
    """Graph compiler configuration section."""
    methods: list[HttpMethod] = Field(default_factory=lambda: list(HttpMethod))
    include_schemas: bool = Field(alias="includeSchemas", default=True)

    @field_validator("methods", mode="before")
    @classmethod
    def normalize_methods(cls, v):
        if isinstance(v, list):
            return [m.upper() if isinstance(m, str) else m for m in v]
        return v

    model_config = ConfigDict(populate_by_name=True)

    @property
    def method_names(self) -> frozenset[str]:
        """Upper-case method names accepted by the compiler."""
        return frozenset(HttpMethod(m).value for m in self.methods)


class ViewConfig(BaseModel):
    """Initial view configuration section."""
    collapse_top_level: bool = Field(alias="collapseTopLevel", default=True)
    cluster_by_top_level: bool = Field(alias="clusterByTopLevel", default=False)

    model_config = ConfigDict(populate_by_name=True)


class LayoutConfig(BaseModel):
    """Layout adapter configuration section."""
    node_width: float = Field(alias="nodeWidth", default=180)
    node_height: float = Field(alias="nodeHeight", default=60)
    direction: LayoutDirection = LayoutDirection.LEFT_RIGHT
    rank_sep: float = Field(alias="rankSep", default=50)
    node_sep: float = Field(alias="nodeSep", default=20)

    @field_validator("node_width", "node_height")
    @classmethod
    def validate_node_size(cls, v):
        if v <= 0:
            raise ValueError("node sizes must be > 0")
        return v

    @field_validator("rank_sep", "node_sep")
    @classmethod
    def validate_separation(cls, v):
        if v < 0:
            raise ValueError("separations must be >= 0")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True)


class ApigraphConfig(BaseModel):
    """Complete apigraph configuration model."""
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> ApigraphConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .apigraph.json

    Returns:
        ApigraphConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e
        try:
            return ApigraphConfig(**config_data)
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}") from e
    else:
        return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .apigraph.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> ApigraphConfig:
    """Create default configuration."""
    return ApigraphConfig()
