"""
遊戲狀態資料模型（常駐記憶體，不落地）

所有模型都以 camelCase 作為 JSON 欄位名稱，與前端溝通時保持一致；
Python 端一律使用 snake_case。
"""
import enum
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============ Enums ============

class LobbyStatus(str, enum.Enum):
    CREATED = "created"
    STARTED = "started"
    ROUND_ACTIVE = "round_active"
    ROUND_RESOLVING = "round_resolving"
    ROUND_ENDED = "round_ended"


class ProductStatus(str, enum.Enum):
    WAITING = "waiting"
    APPROVED = "approved"
    REFUSED = "refused"


class SustainabilityTier(str, enum.Enum):
    NONE = "none"
    LOW = "low"
    HIGH = "high"
    VERY_HIGH = "very_high"


class Scarcity(str, enum.Enum):
    UNAVAILABLE = "unavailable"
    SCARCE = "scarce"
    BALANCED = "balanced"
    OVERSUPPLIED = "oversupplied"


# ============ Product / Production ============

class ProductRequest(CamelModel):
    product_name: str
    description: str = ""
    placement: Optional[str] = None


class PendingProduct(ProductRequest):
    company_name: str


class ProductionPlan(CamelModel):
    product_name: Optional[str] = None
    quantity: int = Field(ge=0)
    price_per_unit: float = Field(ge=0)
    sustainability: SustainabilityTier = SustainabilityTier.NONE
    region: str = ""


class RoundHistoryEntry(CamelModel):
    round: int
    revenue: float
    profit: float
    units_sold: int


class Review(CamelModel):
    id: int
    sentiment: float = 0
    text: str = ""
    company: str
    round: int


# ============ Player ============

class Player(CamelModel):
    name: str

    product_request: Optional[ProductRequest] = None
    products: List[ProductRequest] = []
    product_status: Optional[ProductStatus] = None
    rejection_reason: str = ""

    marketing_strategy: Dict[str, Any] = {}
    active_campaigns: List[Dict[str, Any]] = []
    request_end_round: bool = False

    budget: float = 10_000_000
    satisfaction: float = 50
    sustainability_score: Optional[float] = None

    # 當回合數值
    units_sold: int = 0
    demand: int = 0
    revenue: float = 0
    profit: float = 0
    revenue_per_unit: Optional[float] = None
    ai_feedback: str = ""

    # 累計數值
    total_units_sold: int = 0
    total_revenue: float = 0
    total_profit: float = 0

    production_confirmed: Optional[ProductionPlan] = None
    round_history: List[RoundHistoryEntry] = []
    reviews_by_round: Dict[int, List[Review]] = {}


# ============ Launch Events / News ============

def _coerce_impact(value: Any) -> Optional[float]:
    """百分比影響值：無法解析的值一律視為 None（不影響）"""
    if value is None or isinstance(value, bool):
        return None
    try:
        impact = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(impact):
        return None
    return impact


class LaunchEventEffects(CamelModel):
    demand_impact: Optional[float] = None
    cost_impact: Optional[float] = None

    @field_validator("demand_impact", "cost_impact", mode="before")
    @classmethod
    def parse_impact(cls, value):
        return _coerce_impact(value)


class LaunchEvent(CamelModel):
    id: str
    title: str = ""
    text: str = ""
    effect_round: Optional[int] = None
    in_news: bool = False
    target_companies: List[str] = []
    effects: LaunchEventEffects = Field(default_factory=LaunchEventEffects)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value):
        # Host 端有時會送數字 id
        return str(value) if value is not None else value

    @field_validator("target_companies", mode="before")
    @classmethod
    def default_targets(cls, value):
        return value if isinstance(value, list) else []

    @field_validator("effects", mode="before")
    @classmethod
    def default_effects(cls, value):
        return value if isinstance(value, (dict, LaunchEventEffects)) else {}


class NewsArticle(CamelModel):
    id: str
    title: str = ""
    text: str = ""
    round: Optional[int] = None
    category: str = "event"


# ============ Lobby ============

class Lobby(CamelModel):
    code: str
    host: str
    players: List[Player] = []
    pending_products: List[PendingProduct] = []
    current_round: Optional[int] = None
    status: LobbyStatus = LobbyStatus.CREATED
    launch_events: List[LaunchEvent] = []
    productions: Dict[str, ProductionPlan] = {}

    @property
    def game_started(self) -> bool:
        return self.status != LobbyStatus.CREATED

    @property
    def round_started(self) -> bool:
        return self.status in (LobbyStatus.ROUND_ACTIVE, LobbyStatus.ROUND_RESOLVING)

    @property
    def round_ended(self) -> bool:
        return self.status == LobbyStatus.ROUND_ENDED

    @property
    def resolution_in_progress(self) -> bool:
        return self.status == LobbyStatus.ROUND_RESOLVING

    def find_player(self, company_name: str) -> Optional[Player]:
        return next((p for p in self.players if p.name == company_name), None)
