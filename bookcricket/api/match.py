from fastapi import APIRouter, Depends, HTTPException
from typing import Optional, Dict
import itertools
import logging

from bookcricket.database import SessionLocal
from bookcricket.errors import InvalidConfiguration, InvalidStateTransition
from bookcricket.engine.match_engine import (
    MatchController, MatchConfig, MatchSession, MatchMode, MatchLength
)
from bookcricket.engine.outcomes import DeliveryOutcome
from bookcricket.engine.player_state import PlayerStats
from bookcricket.engine.feedback import crowd_reaction
from bookcricket.engine.history import DatabaseSessionHistory
from bookcricket.api.schemas import (
    StartMatchRequest, RestartMatchRequest, MatchStateResponse, PlayerStatsBrief,
    DeliveryResponse, BallResultResponse, MatchResultResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/match", tags=["Match"])

# In-memory store for active matches; finished scores go to the history table
active_matches: Dict[int, MatchSession] = {}
_match_ids = itertools.count(1)

_controller: Optional[MatchController] = None


def get_controller() -> MatchController:
    """Shared controller - every match writes to the same session history"""
    global _controller
    if _controller is None:
        _controller = MatchController(history=DatabaseSessionHistory(SessionLocal))
    return _controller


def _get_active_match(match_id: int) -> MatchSession:
    if match_id not in active_matches:
        raise HTTPException(status_code=404, detail="Active match session not found")
    return active_matches[match_id]


def _player_brief(stats: Optional[PlayerStats]) -> Optional[PlayerStatsBrief]:
    if stats is None:
        return None
    return PlayerStatsBrief(
        name=stats.name,
        score=stats.score,
        balls=stats.balls_bowled,
        overs=stats.overs_display,
        wickets=stats.wickets_lost,
        is_out=stats.is_out,
        strike_rate=round(stats.strike_rate, 2),
        history=list(stats.delivery_history),
    )


def _delivery_response(outcome: DeliveryOutcome) -> DeliveryResponse:
    return DeliveryResponse(
        page_number=outcome.page_number,
        last_digit=outcome.last_digit,
        score_added=outcome.score_added,
        balls_added=outcome.balls_added,
        category=outcome.category.value,
        message=outcome.message,
        crowd_reaction=crowd_reaction(outcome).value,
    )


def _get_match_state_response(
    match_id: int,
    session: MatchSession,
    controller: MatchController,
    turn_just_changed: bool = False,
) -> MatchStateResponse:
    result = None
    if session.is_over:
        r = controller.result(session)
        result = MatchResultResponse(headline=r.headline, margin=r.margin, winner_name=r.winner, is_tie=r.is_tie)

    return MatchStateResponse(
        match_id=match_id,
        mode=session.config.mode.value,
        status=session.state.value,
        overs=session.config.overs,
        total_wickets=session.config.total_wickets,
        active_player=session.active_player,
        target=session.target,
        is_free_hit=session.free_hit_active,
        is_final_over=session.is_final_over,
        balls_remaining=session.balls_remaining,
        delivery_pending=session.delivery_in_flight,
        player1=_player_brief(session.player1),
        player2=_player_brief(session.player2),
        this_over=[o.short_code for o in session.this_over],
        last_ball=session.last_outcome.message if session.last_outcome else None,
        result=result,
        turn_just_changed=turn_just_changed,
    )


def _build_config(request: StartMatchRequest) -> MatchConfig:
    mode = MatchMode(request.mode.value)
    return MatchConfig.for_length(
        mode=mode,
        length=MatchLength(request.match_length.value),
        p1_name=request.p1_name,
        p2_name=request.p2_name if mode == MatchMode.DUAL else "",
        overs=request.overs,
    )


def _commit(match_id: int, session: MatchSession, controller: MatchController, outcome) -> MatchStateResponse:
    active_before = session.active_player
    try:
        controller.commit_delivery(session, outcome)
    except InvalidStateTransition as e:
        logger.warning("Rejected commit for match %d: %s", match_id, e)
        raise HTTPException(status_code=400, detail=str(e))
    return _get_match_state_response(
        match_id, session, controller, turn_just_changed=session.active_player != active_before
    )


@router.post("/start")
def start_match(request: Optional[StartMatchRequest] = None, controller: MatchController = Depends(get_controller)):
    """Start a new match. With no body, a quick solo match with default names."""
    request = request or StartMatchRequest()
    try:
        session = controller.start_match(_build_config(request))
    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=str(e))

    match_id = next(_match_ids)
    active_matches[match_id] = session
    return _get_match_state_response(match_id, session, controller)


@router.get("/{match_id}/state")
def get_match_state(match_id: int, controller: MatchController = Depends(get_controller)):
    session = _get_active_match(match_id)
    return _get_match_state_response(match_id, session, controller)


@router.post("/{match_id}/delivery")
def request_delivery(match_id: int, controller: MatchController = Depends(get_controller)):
    """Flip the page. The result is held until /commit is called."""
    session = _get_active_match(match_id)
    try:
        outcome = controller.request_delivery(session)
    except InvalidStateTransition as e:
        logger.warning("Rejected delivery for match %d: %s", match_id, e)
        raise HTTPException(status_code=400, detail=str(e))
    return BallResultResponse(
        delivery=_delivery_response(outcome),
        match_state=_get_match_state_response(match_id, session, controller),
    )


@router.post("/{match_id}/commit")
def commit_delivery(match_id: int, controller: MatchController = Depends(get_controller)):
    session = _get_active_match(match_id)
    return _commit(match_id, session, controller, session.pending_outcome)


@router.post("/{match_id}/ball")
def play_ball(match_id: int, controller: MatchController = Depends(get_controller)):
    """Flip and commit in one go"""
    session = _get_active_match(match_id)
    try:
        outcome = controller.request_delivery(session)
    except InvalidStateTransition as e:
        logger.warning("Rejected delivery for match %d: %s", match_id, e)
        raise HTTPException(status_code=400, detail=str(e))
    return BallResultResponse(
        delivery=_delivery_response(outcome),
        match_state=_commit(match_id, session, controller, outcome),
    )


def _restart_config(request: RestartMatchRequest, current: MatchConfig) -> MatchConfig:
    """Fresh settings over the current ones; a new length brings its own default overs"""
    mode = MatchMode(request.mode.value) if request.mode else current.mode
    if request.match_length:
        length = MatchLength(request.match_length.value)
        overs = request.overs
    else:
        length = current.length
        overs = request.overs if request.overs is not None else current.overs
    return MatchConfig.for_length(
        mode=mode,
        length=length,
        p1_name=request.p1_name if request.p1_name is not None else current.p1_name,
        p2_name=request.p2_name if request.p2_name is not None else (current.p2_name or "Player 2"),
        overs=overs,
    )


@router.post("/{match_id}/restart")
def restart_match(
    match_id: int,
    request: Optional[RestartMatchRequest] = None,
    controller: MatchController = Depends(get_controller),
):
    session = _get_active_match(match_id)
    try:
        config = _restart_config(request, session.config) if request is not None else None
        controller.restart(session, config)
    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _get_match_state_response(match_id, session, controller)


@router.get("/{match_id}/result")
def get_match_result(match_id: int, controller: MatchController = Depends(get_controller)):
    session = _get_active_match(match_id)
    try:
        r = controller.result(session)
    except InvalidStateTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MatchResultResponse(headline=r.headline, margin=r.margin, winner_name=r.winner, is_tie=r.is_tie)
