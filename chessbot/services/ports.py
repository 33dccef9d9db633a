"""Protocols of the collaborators the Game Manager is constructed with."""

from typing import Protocol

from chessbot.api.models import AnnouncementContent

WINNER_ACHIEVEMENT = "Chess Champion"


class ChatPlatform(Protocol):
    """The chat platform the bot lives in."""

    def get_direct_conversation(self, user_a: str, user_b: str) -> str:
        """ID of the direct message conversation between the two users (created if needed)."""
        ...

    def get_username(self, user_id: str) -> str:
        ...

    def create_post(self, content: AnnouncementContent) -> str:
        """Publish the announcement and return its ID."""
        ...

    def update_post(self, content: AnnouncementContent) -> None:
        """Replace the announcement identified by content.announcement_id."""
        ...


class AchievementGranter(Protocol):
    """Badge/achievement subsystem. Fire-and-forget."""

    def grant(self, name: str, user_id: str) -> None:
        ...
