"""
Session history - final scores of completed matches, oldest first
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import sessionmaker

from bookcricket.models.history import ScoreHistoryItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    player_name: str
    score: int
    timestamp: datetime


class SessionHistory:
    """Append-only log held for the lifetime of the application"""

    def __init__(self):
        self._entries: list[HistoryEntry] = []

    def append(self, player_name: str, score: int, timestamp: Optional[datetime] = None) -> HistoryEntry:
        entry = HistoryEntry(
            player_name=player_name,
            score=score,
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        self._entries.append(entry)
        return entry

    def entries(self) -> list[HistoryEntry]:
        """Entries recorded since this history was created"""
        return list(self._entries)

    def load(self, limit: Optional[int] = None) -> list[HistoryEntry]:
        """All known entries, oldest first, optionally only the most recent `limit`"""
        entries = self.entries()
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def __len__(self):
        return len(self._entries)


class DatabaseSessionHistory(SessionHistory):
    """Session history that also writes every entry to the score_history table"""

    def __init__(self, session_factory: sessionmaker):
        super().__init__()
        self.session_factory = session_factory

    def load(self, limit: Optional[int] = None) -> list[HistoryEntry]:
        """Stored entries including earlier runs, oldest first"""
        session = self.session_factory()
        try:
            rows = session.query(ScoreHistoryItem).order_by(ScoreHistoryItem.id).all()
        finally:
            session.close()
        if limit is not None:
            rows = rows[-limit:] if limit > 0 else []
        return [HistoryEntry(r.player_name, r.score, r.played_at) for r in rows]

    def append(self, player_name: str, score: int, timestamp: Optional[datetime] = None) -> HistoryEntry:
        entry = super().append(player_name, score, timestamp)
        session = self.session_factory()
        try:
            session.add(ScoreHistoryItem(
                player_name=entry.player_name,
                score=entry.score,
                played_at=entry.timestamp,
            ))
            session.commit()
        finally:
            session.close()
        logger.debug("Stored final score %s for %s", entry.score, entry.player_name)
        return entry
