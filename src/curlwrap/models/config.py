"""Pydantic configuration models for curlwrap."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field


def _expand_env_var(value: Optional[str]) -> Optional[str]:
    """Expand environment variable references in a string.

    Supports $VAR and ${VAR} syntax. Returns original value if
    the env var is not set.
    """
    import os
    import re

    if value is None:
        return None

    pattern = r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)"

    def replace(match: re.Match) -> str:
        var_name = match.group(1) or match.group(2)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replace, value)


class NetworkConfig(BaseModel):
    """Configuration for transport and network behavior."""

    proxy: Optional[str] = Field(
        None,
        description="Proxy address (host:port), or 'auto' to pick one from the proxy directory",
    )
    proxy_directory_url: Optional[str] = Field(
        None,
        description="Override for the proxy directory queried in 'auto' mode",
    )
    user_agent: Optional[str] = Field(None, description="Custom User-Agent header")
    follow_redirects: Optional[bool] = Field(None, description="Follow Location redirects")
    max_redirects: Optional[int] = Field(None, ge=0, description="Maximum redirects to follow")
    verify_tls: bool = Field(True, description="Verify TLS certificates and host names")
    connect_timeout: Optional[float] = Field(None, gt=0, description="Connection timeout in seconds")
    timeout: Optional[float] = Field(None, gt=0, description="Total request timeout in seconds")

    model_config = {"extra": "forbid"}


class CookieConfig(BaseModel):
    """Configuration for cookies sent with requests.

    The cookie string supports environment variable expansion using
    $VAR or ${VAR} syntax.
    """

    cookie: Optional[str] = Field(None, description="Cookie header value")
    jar: Optional[Path] = Field(
        None,
        description="Cookie jar file; read before requests and written when the client closes",
    )

    model_config = {"extra": "forbid"}

    def model_post_init(self, __context: object) -> None:
        """Expand environment variables in the cookie string after init."""
        if self.cookie:
            object.__setattr__(self, "cookie", _expand_env_var(self.cookie))


class QueryConfig(BaseModel):
    """Configuration for the request method and body."""

    method: Literal["GET", "PUT", "POST"] = Field("GET", description="Request method")
    data: Optional[str] = Field(None, description="Pre-encoded request body")
    form: Optional[dict[str, str]] = Field(None, description="Form fields to encode as the body")

    model_config = {"extra": "forbid"}


class ClientSettings(BaseModel):
    """
    Root configuration model for a curlwrap client.

    Example:
        settings = ClientSettings(
            host="http://site.ru/",
            show_headers=True,
            network=NetworkConfig(follow_redirects=True),
        )

    YAML format:
        host: http://site.ru/
        show_headers: true
        headers:
          X-Requested-With: XMLHttpRequest
        network:
          follow_redirects: true
          proxy: auto
    """

    host: str = Field(..., description="Base host every request path is joined to")
    show_headers: Optional[bool] = Field(
        None,
        description="Capture response headers of every hop",
    )
    referer: Optional[str] = Field(None, description="Referer header")
    headers: dict[str, str] = Field(default_factory=dict, description="Custom request headers")

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    cookies: CookieConfig = Field(default_factory=CookieConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize settings to a YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ClientSettings":
        """Load settings from a YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ClientSettings":
        """Load settings from a YAML file."""
        return cls.from_yaml(path.read_text())
