"""Environment-based token discovery.

The GitHub token can be given in the config file, but most users keep it in
the environment or in a ``.env`` file next to their notes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

TOKEN_FALLBACK_VARS = ("GH_TOKEN", "GITHUB_PAT", "GITHUB_ACCESS_TOKEN")


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    github_token_var: str = "GITHUB_TOKEN"
    search_dir: Path | None = None


class EnvironmentAuthManager:
    """Resolves credentials from environment variables and .env files."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self._dotenv_loaded = False

        if config.load_dotenv:
            self._load_dotenv()

    @property
    def dotenv_loaded(self) -> bool:
        return self._dotenv_loaded

    def _candidates(self) -> list[Path]:
        base = self.config.search_dir or Path.cwd()
        if self.config.dotenv_path:
            explicit = Path(self.config.dotenv_path)
            return [explicit if explicit.is_absolute() else base / explicit]
        return [base / ".env", base / ".env.local"]

    def _load_dotenv(self) -> None:
        for env_file in self._candidates():
            if env_file.exists():
                # never clobber variables the user exported explicitly
                load_dotenv(str(env_file), override=False)
                self._dotenv_loaded = True
                self.logger.debug(f"Loaded environment variables from {env_file}")
                return

    def get_github_token(self) -> str | None:
        token = os.getenv(self.config.github_token_var)
        if token:
            self.logger.debug("Found GitHub token in environment variables")
            return token

        for alt_var in TOKEN_FALLBACK_VARS:
            token = os.getenv(alt_var)
            if token:
                self.logger.debug(f"Found GitHub token in {alt_var}")
                return token

        return None

    def get_authentication_recommendations(self) -> list[str]:
        if self.get_github_token():
            return []
        return [
            f"Set {self.config.github_token_var} environment variable",
            f"Or create .env file with {self.config.github_token_var}=your_token",
            "Or set github.token in issuenote.config.yaml",
        ]


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)


__all__ = [
    "EnvAuthConfig",
    "EnvironmentAuthManager",
    "TOKEN_FALLBACK_VARS",
    "create_env_auth_manager",
]
