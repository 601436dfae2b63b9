"""
Delivery outcome generation.
A delivery is a weighted random digit; the digit decides what happened.
"""
import enum
import random
from dataclasses import dataclass
from typing import Optional


class DeliveryCategory(enum.Enum):
    RUNS = "runs"
    DOT = "dot"
    WIDE = "wide"
    NOBALL = "noball"
    OUT = "out"
    SAVED = "saved"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of a single page flip"""
    page_number: int
    last_digit: int
    score_added: int
    balls_added: int  # 0 for wides and no-balls
    category: DeliveryCategory
    message: str = ""

    @property
    def is_extra(self) -> bool:
        return self.balls_added == 0

    @property
    def short_code(self) -> str:
        """Scoreboard notation for this ball"""
        if self.category == DeliveryCategory.OUT:
            return "W"
        if self.category == DeliveryCategory.WIDE:
            return "Wd"
        if self.category == DeliveryCategory.NOBALL:
            return "Nb"
        if self.category == DeliveryCategory.SAVED:
            return "FH"
        return str(self.score_added)


# Walked in this order; the order is part of the draw
STANDARD_WEIGHTS = [
    (1, 20),
    (2, 20),
    (4, 20),
    (3, 10),
    (7, 10),
    (8, 10),
    (6, 3),
    (9, 3),
    (0, 3),
    (5, 1),
]

# Last over of an innings: more sixes and extras, fewer threes
FINAL_OVER_WEIGHTS = [
    (1, 20),
    (2, 20),
    (4, 20),
    (6, 12),
    (8, 12),
    (7, 12),
    (9, 12),
    (3, 4),
    (0, 4),
    (5, 1),
]

PAGE_PREFIX_COUNT = 50
# Page 0 does not exist; it still has to end in 0
ZERO_PAGE_SUBSTITUTE = 500


def is_final_over(balls_bowled: int, overs: int) -> bool:
    """True once the batter has reached the start of the last over"""
    return balls_bowled >= (overs - 1) * 6


def weights_for(final_over: bool) -> list[tuple[int, int]]:
    return FINAL_OVER_WEIGHTS if final_over else STANDARD_WEIGHTS


def categorize(digit: int, free_hit_active: bool, page_number: Optional[int] = None) -> DeliveryOutcome:
    """Map a digit to its fixed outcome. Never random."""
    if not 0 <= digit <= 9:
        raise ValueError(f"digit must be 0-9, got {digit}")
    if page_number is None:
        page_number = digit if digit else ZERO_PAGE_SUBSTITUTE

    if 1 <= digit <= 6:
        return DeliveryOutcome(page_number, digit, digit, 1, DeliveryCategory.RUNS, f"{digit} RUNS")
    if digit == 7:
        return DeliveryOutcome(page_number, digit, 0, 1, DeliveryCategory.DOT, "DOT BALL")
    if digit == 8:
        return DeliveryOutcome(page_number, digit, 1, 0, DeliveryCategory.WIDE, "WIDE BALL")
    if digit == 9:
        return DeliveryOutcome(page_number, digit, 1, 0, DeliveryCategory.NOBALL, "NO BALL")
    if free_hit_active:
        return DeliveryOutcome(page_number, digit, 0, 1, DeliveryCategory.SAVED, "SAVED BY FREEHIT")
    return DeliveryOutcome(page_number, digit, 0, 1, DeliveryCategory.OUT, "OUT!")


class OutcomeGenerator:
    """
    Produces delivery outcomes from a random source.
    Pass a seeded random.Random for reproducible matches.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def draw_digit(self, final_over: bool) -> int:
        weights = weights_for(final_over)
        total_weight = sum(weight for _, weight in weights)
        roll = self.rng.random() * total_weight

        for digit, weight in weights:
            if roll < weight:
                return digit
            roll -= weight
        return weights[0][0]  # float rounding at the top of the range

    def page_number_for(self, digit: int) -> int:
        page_number = self.rng.randrange(PAGE_PREFIX_COUNT) * 10 + digit
        if page_number == 0:
            page_number = ZERO_PAGE_SUBSTITUTE
        return page_number

    def resolve(self, final_over: bool, free_hit_active: bool) -> DeliveryOutcome:
        digit = self.draw_digit(final_over)
        return categorize(digit, free_hit_active, self.page_number_for(digit))
