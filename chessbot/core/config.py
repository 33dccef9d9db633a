"""Runtime settings of the chess bot, read from the environment."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Self

ENV_PREFIX = "CHESSBOT_"


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///chessbot.db"
    site_url: str = "http://localhost:8065"
    plugin_id: str = "chess"
    board_size: int = 400

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Override defaults with CHESSBOT_* variables (e.g. CHESSBOT_SITE_URL)."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            database_url=env.get(f"{ENV_PREFIX}DATABASE_URL", defaults.database_url),
            site_url=env.get(f"{ENV_PREFIX}SITE_URL", defaults.site_url).rstrip("/"),
            plugin_id=env.get(f"{ENV_PREFIX}PLUGIN_ID", defaults.plugin_id),
            board_size=int(env.get(f"{ENV_PREFIX}BOARD_SIZE", defaults.board_size)),
        )

    @property
    def plugin_url(self) -> str:
        return f"{self.site_url}/plugins/{self.plugin_id}"

    def move_url(self, game_id: str) -> str:
        return f"{self.plugin_url}/move/{game_id}"

    def resign_url(self, game_id: str) -> str:
        return f"{self.plugin_url}/resign/{game_id}"

    def image_url(self, game_id: str) -> str:
        return f"{self.plugin_url}/images/{game_id}"
