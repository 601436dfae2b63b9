"""
Hooks for the sound/animation side of the game.
Listeners hear about events after the engine has decided them.
"""
import enum
from dataclasses import dataclass
from typing import Callable, Optional

from bookcricket.engine.outcomes import DeliveryOutcome, DeliveryCategory


class FeedbackKind(enum.Enum):
    CLICK = "click"
    DELIVERY_RESOLVED = "delivery_resolved"
    CROWD_REACTION = "crowd_reaction"
    TURN_CHANGED = "turn_changed"
    MATCH_OVER = "match_over"


class CrowdReaction(enum.Enum):
    CHEER = "cheer"
    OOH = "ooh"
    SLOW_CLAP = "slow_clap"


@dataclass(frozen=True)
class FeedbackEvent:
    kind: FeedbackKind
    outcome: Optional[DeliveryOutcome] = None
    reaction: Optional[CrowdReaction] = None
    active_player: Optional[int] = None


FeedbackListener = Callable[[FeedbackEvent], None]


def crowd_reaction(outcome: DeliveryOutcome) -> CrowdReaction:
    category = outcome.category
    if category == DeliveryCategory.RUNS:
        return CrowdReaction.CHEER if outcome.score_added >= 4 else CrowdReaction.SLOW_CLAP
    if category in (DeliveryCategory.OUT, DeliveryCategory.WIDE, DeliveryCategory.NOBALL):
        return CrowdReaction.OOH
    if category == DeliveryCategory.SAVED:
        return CrowdReaction.CHEER
    return CrowdReaction.SLOW_CLAP
