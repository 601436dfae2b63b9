from bookcricket.models.history import ScoreHistoryItem

__all__ = [
    "ScoreHistoryItem",
]
