"""
Estimator：外部需求／新聞估算服務的能力介面

回合結算只依賴 Estimator Protocol：
- estimate_demand(context) -> DemandResult   每個玩家一次
- generate_news(context) -> [GeneratedArticle] 每個 Lobby 每回合一次

正式環境使用 LLMEstimator（OpenAI-compatible API）；測試用決定性的 stub 取代。
LLM 的輸出一律視為不可信：去掉 code fence、json.loads、再用 pydantic 驗證結構。
"""
import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from models import Scarcity
from core.exceptions import MalformedEstimatorOutput
from services.llm_client import LLMClient
from services.marketing_data import MarketingStats
from services.prompt_service import NEWS_ARTICLE_COUNT, build_demand_prompt, build_news_prompt

logger = logging.getLogger(__name__)


# ============ Context（送給 Estimator 的資料） ============

@dataclass
class DemandContext:
    company_name: str
    product_name: str
    product_description: str
    price_per_unit: float
    units_available: int
    units_sold_last_round: int
    scarcity: Scarcity
    sustainability_claim: str
    region_cost_level: str
    marketing_pressure: float
    marketing_strategy: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PlayerRoundSummary:
    name: str
    units_sold: int
    profit: float


@dataclass
class RoundNewsContext:
    round: int
    players: List[PlayerRoundSummary]
    top_seller: PlayerRoundSummary
    lowest_seller: PlayerRoundSummary


# ============ Result（Estimator 回傳的資料） ============

def _number_or_default(value, default):
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


class EstimatedReview(BaseModel):
    sentiment: float = 0
    text: str = ""

    @field_validator("sentiment", mode="before")
    @classmethod
    def parse_sentiment(cls, value):
        return _number_or_default(value, 0)

    @field_validator("text", mode="before")
    @classmethod
    def parse_text(cls, value):
        return "" if value is None else str(value)


class DemandResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # 需求值保持原樣，由結算端強制轉成 >= 0 的數字
    absolute_demand: Any = Field(alias="absoluteDemand")
    satisfaction_delta: float = Field(0, alias="satisfactionDelta")
    sustainability_score: Optional[float] = Field(None, alias="sustainabilityScore")
    summary: str = ""
    reviews: List[EstimatedReview] = []

    @field_validator("satisfaction_delta", mode="before")
    @classmethod
    def parse_delta(cls, value):
        return _number_or_default(value, 0)

    @field_validator("sustainability_score", mode="before")
    @classmethod
    def parse_score(cls, value):
        return _number_or_default(value, None)

    @field_validator("summary", mode="before")
    @classmethod
    def parse_summary(cls, value):
        return "" if value is None else value

    @field_validator("reviews", mode="before")
    @classmethod
    def parse_reviews(cls, value):
        if not isinstance(value, list):
            return []
        return [r for r in value if isinstance(r, (dict, EstimatedReview))]


class GeneratedArticle(BaseModel):
    title: str
    text: str
    type: str = "news"


# ============ 解析 ============

def strip_code_fences(raw: str) -> str:
    """去掉 LLM 常包在 JSON 外面的 ```json ... ``` 標記"""
    return raw.replace("```json", "").replace("```", "").strip()


def _load_json(raw: str):
    try:
        return json.loads(strip_code_fences(raw))
    except (TypeError, json.JSONDecodeError) as e:
        raise MalformedEstimatorOutput(f"Estimator returned invalid JSON: {e}") from e


def parse_demand_response(raw: str) -> DemandResult:
    """
    解析每個玩家的需求估算結果

    異常：
        MalformedEstimatorOutput: 不是 JSON 物件或缺少 absoluteDemand
    """
    data = _load_json(raw)
    if not isinstance(data, dict):
        raise MalformedEstimatorOutput(f"Expected a JSON object, got {type(data).__name__}")
    try:
        return DemandResult.model_validate(data)
    except ValidationError as e:
        raise MalformedEstimatorOutput(f"Demand payload failed validation: {e}") from e


def parse_news_response(raw: str) -> List[GeneratedArticle]:
    """
    解析回合新聞

    異常：
        MalformedEstimatorOutput: 不是 JSON 陣列或文章缺少 title/text
    """
    data = _load_json(raw)
    if not isinstance(data, list):
        raise MalformedEstimatorOutput(f"Expected a JSON array, got {type(data).__name__}")
    try:
        articles = [GeneratedArticle.model_validate(item) for item in data]
    except ValidationError as e:
        raise MalformedEstimatorOutput(f"News payload failed validation: {e}") from e

    if len(articles) != NEWS_ARTICLE_COUNT:
        logger.warning(f"Expected {NEWS_ARTICLE_COUNT} news articles, got {len(articles)}")
    return articles


# ============ Estimator ============

class Estimator(Protocol):
    async def estimate_demand(self, context: DemandContext) -> DemandResult:
        ...

    async def generate_news(self, context: RoundNewsContext) -> List[GeneratedArticle]:
        ...


class LLMEstimator:
    """透過 LLM 估算需求與生成新聞"""

    def __init__(self, client: LLMClient, marketing_stats: MarketingStats):
        self.client = client
        self.marketing_stats = marketing_stats

    async def estimate_demand(self, context: DemandContext) -> DemandResult:
        prompt = build_demand_prompt(context, self.marketing_stats)
        raw = await self.client.complete(prompt)
        return parse_demand_response(raw)

    async def generate_news(self, context: RoundNewsContext) -> List[GeneratedArticle]:
        prompt = build_news_prompt(context)
        raw = await self.client.complete(prompt)
        return parse_news_response(raw)


def get_estimator(request: Request) -> Estimator:
    """FastAPI dependency：取得程序內的 Estimator"""
    return request.app.state.estimator
