"""
Match controller.
Sequences turns between one or two players, ball by ball, and decides when the
match is over. Resolving a delivery and committing it are separate calls so the
caller can animate in between.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Optional

from bookcricket.config import settings
from bookcricket.errors import InvalidConfiguration, InvalidStateTransition
from bookcricket.engine.outcomes import OutcomeGenerator, DeliveryOutcome, is_final_over
from bookcricket.engine.player_state import PlayerStats, fresh_stats, apply_outcome
from bookcricket.engine.feedback import (
    FeedbackEvent, FeedbackKind, FeedbackListener, CrowdReaction, crowd_reaction
)
from bookcricket.engine.history import SessionHistory, HistoryEntry

logger = logging.getLogger(__name__)


class MatchMode(enum.Enum):
    SOLO = "solo"
    DUAL = "dual"


class MatchLength(enum.Enum):
    QUICK = "quick"
    LONG = "long"

    @classmethod
    def for_wickets(cls, wickets: int) -> "MatchLength":
        return cls.LONG if wickets == settings.LONG_WICKETS else cls.QUICK

    @property
    def wickets(self) -> int:
        return settings.QUICK_WICKETS if self == MatchLength.QUICK else settings.LONG_WICKETS

    @property
    def default_overs(self) -> int:
        return settings.QUICK_DEFAULT_OVERS if self == MatchLength.QUICK else settings.LONG_DEFAULT_OVERS

    def check_overs(self, overs: int):
        """Quick matches take 1-10 overs, long matches one of the fixed presets"""
        if self == MatchLength.QUICK:
            if not settings.MIN_OVERS <= overs <= settings.QUICK_MAX_OVERS:
                raise InvalidConfiguration(
                    f"Quick matches are {settings.MIN_OVERS}-{settings.QUICK_MAX_OVERS} overs, got {overs}"
                )
        elif overs not in settings.LONG_OVER_PRESETS:
            presets = ", ".join(str(o) for o in settings.LONG_OVER_PRESETS)
            raise InvalidConfiguration(f"Long matches are {presets} overs, got {overs}")


class MatchState(enum.Enum):
    AWAITING_PLAYER1 = "awaiting_player1"
    AWAITING_PLAYER2 = "awaiting_player2"
    MATCH_OVER = "match_over"


@dataclass(frozen=True)
class MatchConfig:
    """Fixed for the duration of a match"""
    mode: MatchMode
    overs: int
    total_wickets: int
    p1_name: str
    p2_name: str = ""

    @classmethod
    def for_length(
        cls,
        mode: MatchMode,
        length: MatchLength,
        p1_name: str,
        p2_name: str = "",
        overs: Optional[int] = None,
    ) -> "MatchConfig":
        """Config for a quick or long match, with overs checked against what that length offers"""
        if overs is None:
            overs = length.default_overs
        else:
            length.check_overs(overs)
        return cls(
            mode=mode,
            overs=overs,
            total_wickets=length.wickets,
            p1_name=p1_name,
            p2_name=p2_name,
        )

    @property
    def length(self) -> MatchLength:
        return MatchLength.for_wickets(self.total_wickets)

    @property
    def total_balls(self) -> int:
        return self.overs * 6

    def validate(self):
        if self.overs < 1:
            raise InvalidConfiguration(f"Overs must be at least 1, got {self.overs}")
        if self.total_wickets < 1:
            raise InvalidConfiguration(f"Wickets must be at least 1, got {self.total_wickets}")
        if not self.p1_name or not self.p1_name.strip():
            raise InvalidConfiguration("Player 1 needs a name")
        if self.mode == MatchMode.DUAL and (not self.p2_name or not self.p2_name.strip()):
            raise InvalidConfiguration("Player 2 needs a name in a two player match")


@dataclass
class MatchSession:
    """Everything about one match in progress"""
    config: MatchConfig
    player1: PlayerStats
    player2: Optional[PlayerStats] = None
    active_player: int = 1
    free_hit_active: bool = False
    state: MatchState = MatchState.AWAITING_PLAYER1
    pending_outcome: Optional[DeliveryOutcome] = None
    last_outcome: Optional[DeliveryOutcome] = None
    this_over: list[DeliveryOutcome] = field(default_factory=list)  # current over, extras included

    @property
    def is_over(self) -> bool:
        return self.state == MatchState.MATCH_OVER

    @property
    def delivery_in_flight(self) -> bool:
        return self.pending_outcome is not None

    @property
    def active_stats(self) -> PlayerStats:
        return self.player2 if self.active_player == 2 else self.player1

    @property
    def target(self) -> Optional[int]:
        """Runs player 2 needs; only set once the chase has started"""
        if self.config.mode == MatchMode.DUAL and self.active_player == 2:
            return self.player1.score + 1
        return None

    @property
    def balls_remaining(self) -> int:
        return max(0, self.config.total_balls - self.active_stats.balls_bowled)

    @property
    def is_final_over(self) -> bool:
        return is_final_over(self.active_stats.balls_bowled, self.config.overs)

    def players(self) -> list[PlayerStats]:
        if self.player2 is None:
            return [self.player1]
        return [self.player1, self.player2]


@dataclass(frozen=True)
class MatchResult:
    headline: str
    margin: str
    winner: Optional[str] = None
    is_tie: bool = False


def is_turn_over(stats: PlayerStats, total_balls: int) -> bool:
    return stats.is_out or stats.balls_bowled >= total_balls


def next_state(session: MatchSession, updated: PlayerStats) -> MatchState:
    """
    The one place turn and match transitions are decided.
    `updated` is the active player's stats after the delivery.
    """
    if session.state == MatchState.MATCH_OVER:
        return MatchState.MATCH_OVER

    turn_over = is_turn_over(updated, session.config.total_balls)

    if session.config.mode == MatchMode.SOLO:
        return MatchState.MATCH_OVER if turn_over else MatchState.AWAITING_PLAYER1

    if session.state == MatchState.AWAITING_PLAYER1:
        return MatchState.AWAITING_PLAYER2 if turn_over else MatchState.AWAITING_PLAYER1

    # Player 2 chasing: reaching the target ends it immediately
    if updated.score >= session.player1.score + 1:
        return MatchState.MATCH_OVER
    if turn_over:
        return MatchState.MATCH_OVER
    return MatchState.AWAITING_PLAYER2


def determine_result(session: MatchSession) -> MatchResult:
    p1 = session.player1
    if session.config.mode == MatchMode.SOLO:
        return MatchResult(headline="INNINGS OVER", margin=f"You scored {p1.score} runs!")

    p2 = session.player2
    if p1.score > p2.score:
        return MatchResult(
            headline=f"{p1.name} WINS!",
            margin=f"Won by {p1.score - p2.score} runs",
            winner=p1.name,
        )
    if p2.score > p1.score:
        wickets_left = session.config.total_wickets - p2.wickets_lost
        margin = f"Successful chase! Won by {wickets_left} wicket{'s' if wickets_left != 1 else ''}"
        balls_left = session.config.total_balls - p2.balls_bowled
        if balls_left > 0:
            margin += f" ({balls_left} balls remaining)"
        return MatchResult(headline=f"{p2.name} WINS!", margin=margin, winner=p2.name)
    return MatchResult(headline="IT'S A TIE!", margin="What a match!", is_tie=True)


class MatchController:
    """
    Owns the rules for running a match.
    One controller can run many matches; all of them write to the same history.
    """

    def __init__(self, generator: Optional[OutcomeGenerator] = None, history: Optional[SessionHistory] = None):
        self.generator = generator or OutcomeGenerator()
        self.history = history if history is not None else SessionHistory()
        self._listeners: list[FeedbackListener] = []

    def subscribe(self, listener: FeedbackListener):
        self._listeners.append(listener)

    def _notify(self, event: FeedbackEvent):
        for listener in self._listeners:
            listener(event)

    def _new_session(self, config: MatchConfig) -> MatchSession:
        return MatchSession(
            config=config,
            player1=fresh_stats(config.p1_name),
            player2=fresh_stats(config.p2_name) if config.mode == MatchMode.DUAL else None,
        )

    def start_match(self, config: MatchConfig) -> MatchSession:
        config.validate()
        session = self._new_session(config)
        logger.info(
            "Match started: %s, %d overs, %d wickets, %s",
            config.mode.value, config.overs, config.total_wickets,
            " vs ".join(p.name for p in session.players()),
        )
        return session

    def request_delivery(self, session: MatchSession) -> DeliveryOutcome:
        """Resolve the next delivery. It stays in flight until committed."""
        if session.is_over:
            raise InvalidStateTransition("Match already complete")
        if session.delivery_in_flight:
            raise InvalidStateTransition("A delivery is already waiting to be committed")
        if session.active_stats.is_out:
            raise InvalidStateTransition(f"{session.active_stats.name} is already all out")

        self._notify(FeedbackEvent(FeedbackKind.CLICK, active_player=session.active_player))

        outcome = self.generator.resolve(session.is_final_over, session.free_hit_active)
        session.pending_outcome = outcome
        logger.debug(
            "Page %d for %s: %s", outcome.page_number, session.active_stats.name, outcome.message
        )

        self._notify(FeedbackEvent(FeedbackKind.DELIVERY_RESOLVED, outcome=outcome, active_player=session.active_player))
        self._notify(FeedbackEvent(
            FeedbackKind.CROWD_REACTION,
            outcome=outcome,
            reaction=crowd_reaction(outcome),
            active_player=session.active_player,
        ))
        return outcome

    def commit_delivery(self, session: MatchSession, outcome: DeliveryOutcome) -> MatchSession:
        """Apply the in-flight delivery to the match"""
        if session.is_over:
            raise InvalidStateTransition("Match already complete")
        if session.pending_outcome is None:
            raise InvalidStateTransition("No delivery in flight to commit")
        if outcome != session.pending_outcome:
            raise InvalidStateTransition("Outcome does not match the delivery in flight")

        updated, free_hit = apply_outcome(
            session.active_stats, outcome, session.config.total_wickets, session.free_hit_active
        )
        new_state = next_state(session, updated)

        if session.active_player == 2:
            session.player2 = updated
        else:
            session.player1 = updated
        session.free_hit_active = free_hit
        session.pending_outcome = None
        session.last_outcome = outcome

        legal_balls = [o for o in session.this_over if not o.is_extra]
        if len(legal_balls) >= 6:
            session.this_over = []
        session.this_over.append(outcome)

        events = []
        if new_state == MatchState.AWAITING_PLAYER2 and session.state == MatchState.AWAITING_PLAYER1:
            session.active_player = 2
            session.free_hit_active = False
            session.this_over = []
            logger.info(
                "%s finished on %d/%d; %s needs %d",
                updated.name, updated.score, updated.wickets_lost, session.player2.name, session.target,
            )
            events.append(FeedbackEvent(FeedbackKind.TURN_CHANGED, active_player=2))

        session.state = new_state
        if new_state == MatchState.MATCH_OVER:
            events.append(self._finalize(session))

        # Listeners only see a session that is already consistent
        for event in events:
            self._notify(event)
        return session

    def submit_delivery(self, session: MatchSession) -> DeliveryOutcome:
        """Resolve and commit in one step, for callers with no animation to wait on"""
        outcome = self.request_delivery(session)
        self.commit_delivery(session, outcome)
        return outcome

    def _finalize(self, session: MatchSession) -> FeedbackEvent:
        for stats in session.players():
            self.history.append(stats.name, stats.score)
        result = determine_result(session)
        logger.info("Match over: %s %s", result.headline, result.margin)
        reaction = CrowdReaction.CHEER if session.config.mode == MatchMode.DUAL else None
        return FeedbackEvent(FeedbackKind.MATCH_OVER, reaction=reaction)

    def restart(self, session: MatchSession, config: Optional[MatchConfig] = None) -> MatchSession:
        """
        Start the same match again from the first ball.
        Names and settings carry over unless a new config is given.
        """
        if config is not None:
            config.validate()
        fresh = self._new_session(config or session.config)
        session.config = fresh.config
        session.player1 = fresh.player1
        session.player2 = fresh.player2
        session.active_player = 1
        session.free_hit_active = False
        session.state = MatchState.AWAITING_PLAYER1
        session.pending_outcome = None
        session.last_outcome = None
        session.this_over = []
        logger.info("Match restarted")
        return session

    def result(self, session: MatchSession) -> MatchResult:
        if not session.is_over:
            raise InvalidStateTransition("Match is still in progress")
        return determine_result(session)

    def get_session_history(self) -> list[HistoryEntry]:
        return self.history.entries()
