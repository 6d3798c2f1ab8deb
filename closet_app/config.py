"""Configuration helpers for the closet backend and client."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_API_BASE_URL = "http://localhost:3000"


@dataclass
class ClosetConfig:
    """Configuration values for the closet services.

    Vendor credentials are optional. A missing credential disables the
    matching source rather than failing startup, and ``/api/health`` reports
    which ones are present.
    """

    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    serpapi_key: Optional[str] = None
    rakuten_app_id: Optional[str] = None
    request_timeout_seconds: float = 10.0
    catalog_store_backend: str = "json"
    catalog_store_path: Optional[str] = None
    api_base_url: str = DEFAULT_API_BASE_URL
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "ClosetConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that secrets can be
        injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("CLOSET_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        timeout = get_value("request_timeout_seconds", "10")
        try:
            timeout_seconds = float(timeout or 10.0)
        except ValueError:
            timeout_seconds = 10.0

        return cls(
            gemini_api_key=get_value("gemini_api_key") or None,
            gemini_model=str(get_value("gemini_model", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL),
            serpapi_key=get_value("serpapi_key") or None,
            rakuten_app_id=get_value("rakuten_app_id") or None,
            request_timeout_seconds=timeout_seconds,
            catalog_store_backend=str(get_value("catalog_store_backend", "json") or "json"),
            catalog_store_path=get_value("catalog_store_path"),
            api_base_url=str(get_value("api_base_url", DEFAULT_API_BASE_URL) or DEFAULT_API_BASE_URL),
            environment=env_name,
        )

    def configured_services(self) -> dict[str, bool]:
        """Report which third-party credentials are present."""

        return {
            "gemini": bool(self.gemini_api_key),
            "serpapi": bool(self.serpapi_key),
            "rakuten": bool(self.rakuten_app_id),
        }

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
