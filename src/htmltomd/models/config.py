"""Pydantic configuration models for the htmltomd server."""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class ByteSize(int):
    """
    Custom type that parses human-readable byte sizes.

    Accepts:
        - Integers (bytes)
        - Strings like '200kb', '1mb', '5gb'

    Examples:
        >>> ByteSize._parse('200kb')
        204800
        >>> ByteSize._parse('1mb')
        1048576
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> Any:
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(cls._parse)

    @classmethod
    def _parse(cls, v: Any) -> int:
        if isinstance(v, int):
            return v
        if isinstance(v, str):
            v = v.lower().strip()
            # Longer suffixes first
            units = [("gb", 1024**3), ("mb", 1024**2), ("kb", 1024), ("b", 1)]
            for unit, mult in units:
                if v.endswith(unit):
                    num_str = v[: -len(unit)].strip()
                    try:
                        return int(float(num_str) * mult)
                    except ValueError as err:
                        raise ValueError(f"Invalid number in byte size: {v}") from err
            try:
                return int(v)
            except ValueError:
                pass
        raise ValueError(f"Invalid byte size: {v}. Use format like '200kb', '1mb', or integer bytes.")


class FetchConfig(BaseModel):
    """Configuration for fetching the source page."""

    timeout: float = Field(30.0, gt=0, description="Total fetch timeout in seconds")
    max_content_size: ByteSize = Field(
        ByteSize(10 * 1024 * 1024),
        description="Maximum response size (e.g., '500kb', '10mb')",
    )
    user_agent: Optional[str] = Field(None, description="Custom User-Agent header")
    proxy: Optional[str] = Field(None, description="HTTP/HTTPS proxy URL")

    model_config = {"extra": "forbid"}


class SecurityConfig(BaseModel):
    """URL policy applied to every requested page."""

    allowed_schemes: set[str] = Field(
        default_factory=lambda: {"http", "https"},
        description="URL schemes that may be fetched",
    )
    allowed_domains: Optional[set[str]] = Field(
        None,
        description="If set, only these hostnames may be fetched",
    )
    block_private_ips: bool = Field(
        False,
        description="Reject localhost, internal suffixes and private IP literals",
    )

    model_config = {"extra": "forbid"}


class ConversionConfig(BaseModel):
    """Markdown conversion settings."""

    rewrite_all_links: bool = Field(
        False,
        description="Rewrite every relative link on a line instead of only the first",
    )
    ignore_images: bool = Field(False, description="Drop images from the Markdown output")
    ignore_tables: bool = Field(False, description="Render tables as plain text")

    model_config = {"extra": "forbid"}


class ServerConfig(BaseModel):
    """
    Root configuration model for htmltomd.

    Example:
        config = ServerConfig(port=9000, fetch=FetchConfig(timeout=10))

    YAML format:
        host: 127.0.0.1
        port: 9000
        fetch:
          timeout: 10
          max_content_size: 5mb
        security:
          block_private_ips: true
    """

    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(8080, ge=1, le=65535, description="Port to listen on")
    route: str = Field("/convert", pattern=r"^/", description="Path of the conversion endpoint")

    fetch: FetchConfig = Field(default_factory=FetchConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ServerConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ServerConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
