"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from bookcricket.config import settings


# Enums
class MatchModeEnum(str, Enum):
    SOLO = "solo"
    DUAL = "dual"


class MatchLengthEnum(str, Enum):
    QUICK = "quick"
    LONG = "long"


# Match Schemas
class StartMatchRequest(BaseModel):
    mode: MatchModeEnum = MatchModeEnum.SOLO
    match_length: MatchLengthEnum = MatchLengthEnum.QUICK
    overs: Optional[int] = Field(default=None, ge=settings.MIN_OVERS, le=settings.MAX_OVERS)
    p1_name: str = "Player 1"
    p2_name: str = "Player 2"


class RestartMatchRequest(BaseModel):
    """Optional fresh settings for a restart; omitted fields keep the current ones"""
    mode: Optional[MatchModeEnum] = None
    match_length: Optional[MatchLengthEnum] = None
    overs: Optional[int] = Field(default=None, ge=settings.MIN_OVERS, le=settings.MAX_OVERS)
    p1_name: Optional[str] = None
    p2_name: Optional[str] = None


class PlayerStatsBrief(BaseModel):
    name: str
    score: int = 0
    balls: int = 0
    overs: str = "0.0"
    wickets: int = 0
    is_out: bool = False
    strike_rate: float = 0.0
    history: list[int] = []


class DeliveryResponse(BaseModel):
    page_number: int
    last_digit: int
    score_added: int
    balls_added: int
    category: str
    message: str
    crowd_reaction: str


class MatchResultResponse(BaseModel):
    headline: str
    margin: str
    winner_name: Optional[str] = None
    is_tie: bool = False


class MatchStateResponse(BaseModel):
    match_id: int
    mode: str
    status: str  # awaiting_player1, awaiting_player2, match_over
    overs: int
    total_wickets: int

    active_player: int
    target: Optional[int] = None
    is_free_hit: bool
    is_final_over: bool
    balls_remaining: int
    delivery_pending: bool

    player1: PlayerStatsBrief
    player2: Optional[PlayerStatsBrief] = None

    this_over: list[str]
    last_ball: Optional[str] = None

    result: Optional[MatchResultResponse] = None
    turn_just_changed: bool = False


class BallResultResponse(BaseModel):
    delivery: DeliveryResponse
    match_state: MatchStateResponse


# History Schemas
class HistoryItemResponse(BaseModel):
    player_name: str
    score: int
    timestamp: datetime
