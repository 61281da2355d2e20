from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from .env_auth import EnvAuthConfig, create_env_auth_manager

CONFIG_DEFAULT = "issuenote.config.yaml"
DEFAULT_API_URL = "https://api.github.com"


class ConfigError(RuntimeError):
    pass


@dataclass
class NoteConfig:
    version: int
    config_file: Path | None
    # Global repository defaults; notes may override owner/repo
    owner: str | None
    repo: str | None
    token: str | None
    api_url: str
    vault_root: Path
    # Logging configuration
    logging_json_enabled: bool
    logging_level: str
    # Environment authentication configuration
    env_auth_load_dotenv: bool
    env_auth_dotenv_path: str | None

    def missing_settings(self) -> list[str]:
        return [name for name in ("owner", "repo", "token") if not getattr(self, name)]


def _resolve_env_var(value: Any) -> Any:
    """Resolve ``$NAME`` values from the environment (``None`` when unset)."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:])
    return value


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def load_config(path: str | Path) -> NoteConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        loaded = yaml.safe_load(p.read_text(encoding='utf-8')) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f'Configuration root in {p} must be a mapping')
    raw = cast(dict[str, Any], loaded)
    gh = cast(dict[str, Any], raw.get('github', {}) or {})
    vault = cast(dict[str, Any], raw.get('vault', {}) or {})
    logging_config = cast(dict[str, Any], raw.get('logging', {}) or {})
    env_auth = cast(dict[str, Any], raw.get('environment', {}) or {})

    env_cfg = EnvAuthConfig(
        load_dotenv=bool(env_auth.get('load_dotenv', True)),
        dotenv_path=env_auth.get('dotenv_path'),
        search_dir=p.parent,
    )
    # loads .env first so $NAME values may come from it
    env_manager = create_env_auth_manager(env_cfg)
    token = _optional_str(_resolve_env_var(gh.get('token')))
    if token is None:
        token = env_manager.get_github_token()

    return NoteConfig(
        version=int(raw.get('version', 1)),
        config_file=p,
        owner=_optional_str(_resolve_env_var(gh.get('owner'))),
        repo=_optional_str(_resolve_env_var(gh.get('repo'))),
        token=token,
        api_url=str(gh.get('api_url') or DEFAULT_API_URL),
        # Vault root is relative to the config file, not the working directory
        vault_root=(p.parent / str(vault.get('root', '.'))).resolve(),
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=str(logging_config.get('level', 'INFO')),
        env_auth_load_dotenv=env_cfg.load_dotenv,
        env_auth_dotenv_path=env_cfg.dotenv_path,
    )


__all__ = ["CONFIG_DEFAULT", "ConfigError", "NoteConfig", "load_config"]
