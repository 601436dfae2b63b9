"""
Session history endpoints - final scores of completed matches
"""
from fastapi import APIRouter, Depends, Query
from typing import Optional

from bookcricket.engine.match_engine import MatchController
from bookcricket.api.match import get_controller
from bookcricket.api.schemas import HistoryItemResponse

router = APIRouter(prefix="/history", tags=["History"])


@router.get("", response_model=list[HistoryItemResponse])
def get_history(
    limit: Optional[int] = Query(default=None, ge=1),
    controller: MatchController = Depends(get_controller),
):
    """Finalized scores, oldest first"""
    return [
        HistoryItemResponse(player_name=e.player_name, score=e.score, timestamp=e.timestamp)
        for e in controller.history.load(limit)
    ]
