"""
Configuration Loader

Loads YAML configuration files for the media host and the backend API, and
applies environment overrides from .env / the process environment.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml
from dotenv import load_dotenv

load_dotenv()


@dataclass
class MediaHostConfig:
    """Upload settings for the remote media host."""
    cloud_name: str
    upload_presets: List[str]
    upload_url: str = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"
    folder: str = "kerala-sellers/products"
    tags: List[str] = field(default_factory=lambda: ["product"])
    upload_params: Dict[str, str] = field(default_factory=dict)
    timeout: float = 60.0
    backoff: float = 0.5

    @property
    def endpoint(self) -> str:
        return self.upload_url.format(cloud_name=self.cloud_name)


@dataclass
class ApiSettings:
    """Backend product API settings."""
    base_url: str
    timeout: float = 30.0
    token_key: str = "access_token"


def _get_config_dir() -> Path:
    """Get the config directory path."""
    # Try relative to this file first
    module_dir = Path(__file__).parent.parent.parent
    config_dir = module_dir / 'config'

    if config_dir.exists():
        return config_dir

    # Try current working directory
    cwd_config = Path.cwd() / 'config'
    if cwd_config.exists():
        return cwd_config

    raise FileNotFoundError(
        f"Config directory not found. Tried: {config_dir}, {cwd_config}"
    )


def load_config(filename: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of the config file (e.g., 'media_host.yaml')

    Returns:
        Parsed YAML content as dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    config_path = _get_config_dir() / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def media_host_config_from_dict(data: Dict[str, Any]) -> MediaHostConfig:
    """
    Build a MediaHostConfig from a parsed mapping, applying env overrides.

    Environment:
        STOREFRONT_MEDIA_CLOUD_NAME - replaces cloud_name
        STOREFRONT_UPLOAD_PRESETS   - comma-separated, replaces the preset list

    Raises:
        ValueError: If no cloud name or no upload preset is configured
    """
    cloud_name = os.getenv("STOREFRONT_MEDIA_CLOUD_NAME") or data.get("cloud_name", "")

    env_presets = os.getenv("STOREFRONT_UPLOAD_PRESETS", "")
    if env_presets.strip():
        presets = [p.strip() for p in env_presets.split(",") if p.strip()]
    else:
        primary = data.get("primary_preset")
        presets = ([primary] if primary else []) + list(data.get("fallback_presets", []))

    if not cloud_name:
        raise ValueError("Media host cloud_name is not configured")
    if not presets:
        raise ValueError("At least one upload preset is required")

    config = MediaHostConfig(cloud_name=cloud_name, upload_presets=presets)
    if data.get("upload_url"):
        config.upload_url = data["upload_url"]
    if data.get("folder"):
        config.folder = data["folder"].rstrip("/")
    if "tags" in data:
        config.tags = list(data["tags"] or [])
    config.upload_params = {k: str(v) for k, v in (data.get("upload_params") or {}).items()}
    config.timeout = float(data.get("timeout", config.timeout))
    config.backoff = float(data.get("backoff", config.backoff))
    return config


def load_media_host_config() -> MediaHostConfig:
    """
    Load media host configuration.

    Returns:
        MediaHostConfig with the ordered credential list (primary first)

    Example media_host.yaml:
        cloud_name: dnmbfeckd
        primary_preset: keralasellers_preset
        fallback_presets: [ml_default]
    """
    return media_host_config_from_dict(load_config('media_host.yaml'))


def load_api_settings() -> ApiSettings:
    """
    Load backend API settings.

    STOREFRONT_API_URL overrides the configured base URL.
    """
    data = load_config('api.yaml')
    base_url = os.getenv("STOREFRONT_API_URL") or data.get("base_url", "")
    if not base_url:
        raise ValueError("Backend base_url is not configured")

    return ApiSettings(
        base_url=base_url.rstrip("/"),
        timeout=float(data.get("timeout", 30)),
        token_key=data.get("token_key", "access_token"),
    )
