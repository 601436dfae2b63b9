"""
Finalized match scores
"""
from datetime import datetime
from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from bookcricket.database import Base


class ScoreHistoryItem(Base):
    """One player's final score from a completed match"""
    __tablename__ = "score_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_name: Mapped[str] = mapped_column(String(100))
    score: Mapped[int] = mapped_column(Integer)
    played_at: Mapped[datetime] = mapped_column(DateTime, index=True)

    def __repr__(self):
        return f"<ScoreHistoryItem {self.player_name}: {self.score}>"
