from dataclasses import dataclass, field, replace

from bookcricket.engine.outcomes import DeliveryOutcome, DeliveryCategory


@dataclass
class PlayerStats:
    """Tracks one player's innings"""
    name: str
    score: int = 0
    balls_bowled: int = 0
    wickets_lost: int = 0
    is_out: bool = False  # all out, innings closed
    delivery_history: list[int] = field(default_factory=list)

    @property
    def overs_display(self) -> str:
        return f"{self.balls_bowled // 6}.{self.balls_bowled % 6}"

    @property
    def strike_rate(self) -> float:
        if self.balls_bowled == 0:
            return 0.0
        return (self.score / self.balls_bowled) * 100


def fresh_stats(name: str) -> PlayerStats:
    return PlayerStats(name=name)


def next_free_hit(free_hit_active: bool, category: DeliveryCategory) -> bool:
    """
    A no-ball always grants a free hit. A wide bowled on a free hit keeps it.
    Anything else uses it up, including dots and runs.
    """
    if category == DeliveryCategory.NOBALL:
        return True
    if free_hit_active and category == DeliveryCategory.WIDE:
        return True
    return False


def apply_outcome(
    stats: PlayerStats,
    outcome: DeliveryOutcome,
    total_wickets: int,
    free_hit_active: bool = False,
) -> tuple[PlayerStats, bool]:
    """Return the stats after this delivery and the free-hit flag for the next one"""
    wickets_lost = stats.wickets_lost
    if outcome.category == DeliveryCategory.OUT:
        wickets_lost = min(wickets_lost + 1, total_wickets)

    updated = replace(
        stats,
        score=stats.score + outcome.score_added,
        balls_bowled=stats.balls_bowled + outcome.balls_added,
        wickets_lost=wickets_lost,
        is_out=wickets_lost >= total_wickets,
        delivery_history=stats.delivery_history + [outcome.score_added],
    )
    return updated, next_free_hit(free_hit_active, outcome.category)
