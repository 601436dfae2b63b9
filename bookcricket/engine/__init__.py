from bookcricket.engine.outcomes import OutcomeGenerator, DeliveryOutcome, DeliveryCategory
from bookcricket.engine.match_engine import (
    MatchController, MatchConfig, MatchSession, MatchMode, MatchLength, MatchState, MatchResult
)
from bookcricket.engine.history import SessionHistory, DatabaseSessionHistory

__all__ = [
    "OutcomeGenerator",
    "DeliveryOutcome",
    "DeliveryCategory",
    "MatchController",
    "MatchConfig",
    "MatchSession",
    "MatchMode",
    "MatchLength",
    "MatchState",
    "MatchResult",
    "SessionHistory",
    "DatabaseSessionHistory",
]
