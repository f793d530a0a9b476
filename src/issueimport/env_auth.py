"""Environment-based token discovery.

Looks for a GitHub token in the process environment, after optionally
loading a ``.env`` file with python-dotenv. Tokens are never written
anywhere and never prompted for.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

ALTERNATIVE_TOKEN_VARS = ("GITHUB_TOKEN", "GH_TOKEN", "GITHUB_PAT")


@dataclass
class EnvAuthConfig:
    load_dotenv: bool = True
    dotenv_path: str | None = None
    github_token_var: str = "GITHUB_TOKEN"


class EnvironmentAuthManager:
    def __init__(self, config: EnvAuthConfig | None = None):
        self.config = config or EnvAuthConfig()
        self.logger = get_logger()
        self.dotenv_loaded = False
        if self.config.load_dotenv:
            self._load_dotenv()

    def _load_dotenv(self) -> None:
        candidates = (
            [self.config.dotenv_path] if self.config.dotenv_path else [".env", ".env.local"]
        )
        for location in candidates:
            env_path = Path(location)
            if env_path.is_file():
                load_dotenv(str(env_path), override=False)
                self.dotenv_loaded = True
                self.logger.debug(f"Loaded environment variables from {env_path}")
                return

    def get_github_token(self) -> str | None:
        names = [self.config.github_token_var]
        names.extend(n for n in ALTERNATIVE_TOKEN_VARS if n not in names)
        for name in names:
            raw = os.getenv(name)
            if raw and raw.strip():
                self.logger.debug(f"Found GitHub token in {name}")
                return raw.strip()
        return None


__all__ = ["ALTERNATIVE_TOKEN_VARS", "EnvAuthConfig", "EnvironmentAuthManager"]
