"""
API request / response schemas

所有欄位在 JSON 上使用 camelCase（見 models.CamelModel）
"""
from typing import Any, Dict, List, Optional

from pydantic import Field

from models import CamelModel, LaunchEvent, NewsArticle, PendingProduct, Player, ProductionPlan


# ============ Requests ============

class CreateLobbyRequest(CamelModel):
    username: str = "Host"
    password: Optional[str] = None


class LobbyCodeRequest(CamelModel):
    lobby_code: str


class CompanyRequest(LobbyCodeRequest):
    company_name: str


class SubmitProductRequest(CompanyRequest):
    product_name: str
    description: str = ""
    placement: Optional[str] = None


class RefuseProductRequest(CompanyRequest):
    reason: Optional[str] = None


class SubmitMarketingRequest(CompanyRequest):
    strategy: Dict[str, Any] = {}


class ConfirmProductionRequest(CompanyRequest):
    production: ProductionPlan


class ApplyLaunchEventsRequest(LobbyCodeRequest):
    events: List[LaunchEvent] = []


# ============ Responses ============

class SuccessResponse(CamelModel):
    success: bool = True


class CreateLobbyResponse(CamelModel):
    lobby_code: str


class EndRoundResponse(SuccessResponse):
    ignored: bool = False
    players: List[Player] = []


class CompanyName(CamelModel):
    company_name: str


class LobbyStateResponse(CamelModel):
    current_round: Optional[int] = None
    players: List[CompanyName] = []
    game_started: bool
    round_started: bool
    round_ended: bool


class RoundStateResponse(CamelModel):
    current_round: Optional[int] = None
    round_started: bool
    round_ended: bool
    resolution_in_progress: bool


class LobbyResponse(CamelModel):
    current_round: Optional[int] = None
    players: List[Player] = []
    game_started: bool
    pending_products: List[PendingProduct] = []
    round_started: bool
    round_ended: bool
    leading_companies: List[Dict[str, Any]] = []
    leaderboard: List[Dict[str, Any]] = []


class NewsResponse(CamelModel):
    current_round: Optional[int] = None
    news: List[NewsArticle] = []


class ReviewsResponse(CamelModel):
    current_round: Optional[int] = None
    reviews_by_round: Dict[int, List[Dict[str, Any]]] = Field(default_factory=dict)
