"""
Configuration management for curlkit.

Loads transfer defaults from environment variables or a .env file.
"""

import os
from pathlib import Path
from dataclasses import dataclass
import tempfile

from dotenv import load_dotenv


ENV_LOCATIONS = [
    Path.home() / ".curlkit" / ".env",
    Path.home() / ".config" / "curlkit" / ".env",
    Path.cwd() / ".env",
]


def load_env_file() -> Path | None:
    """Load the first .env file found in the common locations."""
    for env_path in ENV_LOCATIONS:
        if env_path.exists():
            load_dotenv(env_path)
            return env_path
    return None


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class CurlkitConfig:
    """Defaults applied by the sender to every request."""

    user_agent: str = "curlkit/0.1"
    timeout: int = 30  # seconds, whole transfer
    connect_timeout: int = 10

    # Redirects
    follow_redirects: bool = True
    max_redirects: int = 10

    # Downloads land here unless the caller says otherwise
    download_dir: str = tempfile.gettempdir()

    # "host:port", empty for direct connections
    proxy: str = ""

    @classmethod
    def from_env(cls) -> "CurlkitConfig":
        """Load configuration from environment variables."""
        load_env_file()
        return cls(
            user_agent=os.getenv("CURLKIT_USER_AGENT", "curlkit/0.1"),
            timeout=int(os.getenv("CURLKIT_TIMEOUT", "30")),
            connect_timeout=int(os.getenv("CURLKIT_CONNECT_TIMEOUT", "10")),
            follow_redirects=_env_bool("CURLKIT_FOLLOW_REDIRECTS", True),
            max_redirects=int(os.getenv("CURLKIT_MAX_REDIRECTS", "10")),
            download_dir=os.getenv("CURLKIT_DOWNLOAD_DIR", tempfile.gettempdir()),
            proxy=os.getenv("CURLKIT_PROXY", ""),
        )

    @property
    def proxy_host_port(self) -> tuple[str, int] | None:
        """Split the proxy setting into host and port (3128 by default)."""
        if not self.proxy:
            return None
        host, _, port = self.proxy.rpartition(":")
        if not host:
            return self.proxy, 3128
        return host, int(port)


# Global config instance
_config: CurlkitConfig | None = None


def get_config() -> CurlkitConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = CurlkitConfig.from_env()
    return _config


def set_config(config: CurlkitConfig | None) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
