import asyncio
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from config import Settings, get_settings
from core.lobby_store import LobbyStore, get_store
from main import app
from models import LaunchEvent, Lobby, LobbyStatus, Player, ProductRequest, ProductionPlan
from services.estimator import (
    DemandContext,
    DemandResult,
    EstimatedReview,
    GeneratedArticle,
    RoundNewsContext,
    get_estimator,
)

HOST_PASSWORD = "let-me-host"


class StubEstimator:
    """
    Deterministic estimator.

    ``demand`` maps company name to the raw demand returned; ``failures`` maps
    company name to the exception raised instead. ``delay`` suspends every
    demand call so concurrent round-ends overlap.
    """

    def __init__(self, demand=None, failures=None, delay=0.0, news_failure=None):
        self.demand: Dict[str, object] = demand or {}
        self.failures: Dict[str, Exception] = failures or {}
        self.delay = delay
        self.news_failure = news_failure
        self.demand_calls: List[DemandContext] = []
        self.news_calls: List[RoundNewsContext] = []

    async def estimate_demand(self, context: DemandContext) -> DemandResult:
        self.demand_calls.append(context)
        if self.delay:
            await asyncio.sleep(self.delay)
        if context.company_name in self.failures:
            raise self.failures[context.company_name]
        return DemandResult(
            absolute_demand=self.demand.get(context.company_name, 150),
            satisfaction_delta=5,
            sustainability_score=42,
            summary=f"{context.company_name} did fine",
            reviews=[
                EstimatedReview(sentiment=0.8, text="Love the ads"),
                EstimatedReview(sentiment=-0.4, text="Feels manipulative"),
            ],
        )

    async def generate_news(self, context: RoundNewsContext) -> List[GeneratedArticle]:
        self.news_calls.append(context)
        if self.news_failure:
            raise self.news_failure
        return [
            GeneratedArticle(title="Top", text=f"{context.top_seller.name} wins", type="top"),
            GeneratedArticle(title="Flop", text=f"{context.lowest_seller.name} flops", type="flop"),
            GeneratedArticle(title="Inside", text="How demand was made", type="investigation"),
            GeneratedArticle(title="Mood", text="Attention is tired", type="trend"),
        ]


def make_player(name="Acme", with_product=True, plan=None) -> Player:
    player = Player(name=name)
    if with_product:
        player.product_request = ProductRequest(product_name="Glow Socks", description="Socks that glow")
    player.production_confirmed = plan
    return player


def make_plan(quantity=100, price_per_unit=20, region="RegionA") -> ProductionPlan:
    return ProductionPlan(quantity=quantity, price_per_unit=price_per_unit, region=region)


def make_event(event_id="e1", effect_round=1, demand=None, cost=None, targets=None, in_news=True):
    return LaunchEvent.model_validate({
        "id": event_id,
        "title": f"Event {event_id}",
        "text": "Something happened",
        "effectRound": effect_round,
        "inNews": in_news,
        "targetCompanies": targets or [],
        "effects": {"demandImpact": demand, "costImpact": cost},
    })


def add_producing_player(lobby: Lobby, name: str, quantity=100, price_per_unit=20) -> Player:
    plan = make_plan(quantity=quantity, price_per_unit=price_per_unit)
    player = make_player(name, plan=plan)
    lobby.players.append(player)
    lobby.productions[name] = plan
    return player


@pytest.fixture
def store():
    return LobbyStore()


@pytest.fixture
def active_lobby(store):
    lobby = store.create(Lobby(code="ABCDE", host="host"))
    lobby.status = LobbyStatus.ROUND_ACTIVE
    lobby.current_round = 1
    return lobby


@pytest.fixture
def estimator():
    return StubEstimator()


@pytest.fixture
def client(store, estimator):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_estimator] = lambda: estimator
    app.dependency_overrides[get_settings] = lambda: Settings(host_password=HOST_PASSWORD)
    yield TestClient(app)
    app.dependency_overrides.clear()
