import asyncio

import pytest

from conftest import StubEstimator, add_producing_player, make_event, make_plan, make_player
from core.exceptions import (
    EstimatorUnavailable,
    InvalidStateTransition,
    LobbyNotFound,
    MalformedEstimatorOutput,
)
from core.round_manager import RoundManager
from models import Lobby, LobbyStatus, Scarcity


@pytest.mark.asyncio
async def test_end_round_resolves_player(store, active_lobby, estimator):
    player = add_producing_player(active_lobby, "Acme", quantity=100, price_per_unit=20)

    result = await RoundManager.end_round(store, estimator, "ABCDE")

    assert result.ignored is False
    assert active_lobby.status == LobbyStatus.ROUND_ENDED
    assert player.units_sold == 100
    assert player.demand == 150
    assert player.revenue == pytest.approx(2000)
    assert player.profit == pytest.approx(800)
    assert player.budget == pytest.approx(10_000_000 + 800)
    assert player.satisfaction == 55
    assert player.sustainability_score == 42
    assert player.ai_feedback == "Acme did fine"
    assert [r.text for r in player.reviews_by_round[1]] == ["Love the ads", "Feels manipulative"]
    assert player.production_confirmed is None
    assert "Acme" not in active_lobby.productions


@pytest.mark.asyncio
async def test_event_modifiers_applied(store, active_lobby, estimator):
    player = add_producing_player(active_lobby, "Acme")
    active_lobby.launch_events = [make_event(demand=-50, cost=10)]

    await RoundManager.end_round(store, estimator, "ABCDE")

    assert player.demand == 75
    assert player.units_sold == 75
    assert player.profit == pytest.approx(75 * 20 - 75 * 20 * 0.6 * 1.1)


@pytest.mark.asyncio
async def test_players_without_plan_or_product_are_skipped(store, active_lobby, estimator):
    idle = make_player("Idle")
    no_product = make_player("NoProduct", with_product=False, plan=make_plan())
    active_lobby.productions["NoProduct"] = no_product.production_confirmed
    unregistered = make_player("Unregistered", plan=make_plan())
    active_lobby.players.extend([idle, no_product, unregistered])

    result = await RoundManager.end_round(store, estimator, "ABCDE")

    assert result.ignored is False
    assert estimator.demand_calls == []
    for player in (idle, no_product, unregistered):
        assert player.round_history == []
        assert player.units_sold == 0
    assert active_lobby.status == LobbyStatus.ROUND_ENDED


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [EstimatorUnavailable("down"), MalformedEstimatorOutput("garbage"), RuntimeError("boom")],
)
async def test_estimator_failure_only_affects_that_player(store, active_lobby, failure):
    estimator = StubEstimator(failures={"Beta": failure})
    alpha = add_producing_player(active_lobby, "Alpha")
    beta = add_producing_player(active_lobby, "Beta")
    gamma = add_producing_player(active_lobby, "Gamma")

    result = await RoundManager.end_round(store, estimator, "ABCDE")

    assert result.ignored is False
    assert alpha.units_sold == 100
    assert gamma.units_sold == 100
    assert beta.units_sold == 0
    assert beta.round_history == []
    assert beta.budget == 10_000_000
    assert beta.production_confirmed is not None
    assert "Beta" in active_lobby.productions
    assert active_lobby.status == LobbyStatus.ROUND_ENDED


@pytest.mark.asyncio
async def test_untrusted_demand_treated_as_zero(store, active_lobby):
    estimator = StubEstimator(demand={"Acme": "a lot", "Bolt": -30})
    acme = add_producing_player(active_lobby, "Acme")
    bolt = add_producing_player(active_lobby, "Bolt")

    await RoundManager.end_round(store, estimator, "ABCDE")

    for player in (acme, bolt):
        assert player.units_sold == 0
        assert player.profit == 0
        assert len(player.round_history) == 1


@pytest.mark.asyncio
async def test_concurrent_end_round_resolves_once(store, active_lobby):
    estimator = StubEstimator(delay=0.05)
    player = add_producing_player(active_lobby, "Acme")

    first, second = await asyncio.gather(
        RoundManager.end_round(store, estimator, "ABCDE"),
        RoundManager.end_round(store, estimator, "ABCDE"),
    )

    assert sorted([first.ignored, second.ignored]) == [False, True]
    assert len(estimator.demand_calls) == 1
    assert len(estimator.news_calls) == 1
    assert len(player.round_history) == 1
    assert player.total_revenue == pytest.approx(2000)
    assert active_lobby.status == LobbyStatus.ROUND_ENDED


@pytest.mark.asyncio
async def test_end_round_on_ended_round_is_ignored(store, active_lobby, estimator):
    player = add_producing_player(active_lobby, "Acme")
    await RoundManager.end_round(store, estimator, "ABCDE")

    result = await RoundManager.end_round(store, estimator, "ABCDE")

    assert result.ignored is True
    assert len(estimator.demand_calls) == 1
    assert len(player.round_history) == 1
    assert active_lobby.status == LobbyStatus.ROUND_ENDED


@pytest.mark.asyncio
async def test_end_round_before_game_started(store, estimator):
    lobby = store.create(Lobby(code="WAIT1", host="host"))

    with pytest.raises(InvalidStateTransition):
        await RoundManager.end_round(store, estimator, "WAIT1")

    assert lobby.status == LobbyStatus.CREATED
    assert not store.locks["WAIT1"].locked()


@pytest.mark.asyncio
async def test_end_round_unknown_lobby(store, estimator):
    with pytest.raises(LobbyNotFound):
        await RoundManager.end_round(store, estimator, "NOPE0")


@pytest.mark.asyncio
async def test_round_news_generated_once(store, active_lobby, estimator):
    add_producing_player(active_lobby, "Acme")
    add_producing_player(active_lobby, "Bolt", quantity=10)

    await RoundManager.end_round(store, estimator, "ABCDE")

    assert len(estimator.news_calls) == 1
    context = estimator.news_calls[0]
    assert context.round == 1
    assert context.top_seller.name == "Acme"
    assert context.lowest_seller.name == "Bolt"

    news = store.news_for("ABCDE")
    assert [a.category for a in news] == ["top", "flop", "investigation", "trend"]
    assert all(a.round == 1 for a in news)
    assert len({a.id for a in news}) == 4


@pytest.mark.asyncio
async def test_news_failure_does_not_block_round(store, active_lobby):
    estimator = StubEstimator(news_failure=MalformedEstimatorOutput("not a list"))
    player = add_producing_player(active_lobby, "Acme")

    result = await RoundManager.end_round(store, estimator, "ABCDE")

    assert result.ignored is False
    assert player.units_sold == 100
    assert store.news_for("ABCDE") == []
    assert active_lobby.status == LobbyStatus.ROUND_ENDED


@pytest.mark.asyncio
async def test_history_and_totals_across_rounds(store, active_lobby):
    estimator = StubEstimator(demand={"Acme": 60})
    player = add_producing_player(active_lobby, "Acme", quantity=100, price_per_unit=20)

    await RoundManager.end_round(store, estimator, "ABCDE")
    RoundManager.start_next_round(store, "ABCDE")

    plan = make_plan(quantity=50, price_per_unit=30)
    player.production_confirmed = plan
    active_lobby.productions["Acme"] = plan
    await RoundManager.end_round(store, estimator, "ABCDE")

    assert [(h.round, h.units_sold) for h in player.round_history] == [(1, 60), (2, 50)]
    assert player.total_units_sold == sum(h.units_sold for h in player.round_history)
    assert player.total_revenue == pytest.approx(sum(h.revenue for h in player.round_history))
    assert player.total_profit == pytest.approx(sum(h.profit for h in player.round_history))
    assert player.units_sold == 50
    assert player.revenue == pytest.approx(1500)
    assert sorted(player.reviews_by_round) == [1, 2]

    second_context = estimator.demand_calls[1]
    assert second_context.units_sold_last_round == 60
    assert second_context.scarcity == Scarcity.SCARCE


@pytest.mark.asyncio
async def test_unconfirmed_player_keeps_previous_values(store, active_lobby, estimator):
    player = add_producing_player(active_lobby, "Acme")
    await RoundManager.end_round(store, estimator, "ABCDE")
    RoundManager.start_next_round(store, "ABCDE")

    await RoundManager.end_round(store, estimator, "ABCDE")

    assert len(player.round_history) == 1
    assert player.units_sold == 100
    assert player.revenue == pytest.approx(2000)


def test_start_next_round_resets_flags(store, active_lobby):
    player = make_player("Acme")
    player.request_end_round = True
    player.active_campaigns = [{"budget": 1000}]
    active_lobby.players.append(player)
    active_lobby.status = LobbyStatus.ROUND_ENDED

    RoundManager.start_next_round(store, "ABCDE")

    assert active_lobby.current_round == 2
    assert active_lobby.status == LobbyStatus.ROUND_ACTIVE
    assert player.request_end_round is False
    assert player.active_campaigns == []


def test_start_next_round_requires_ended_round(store, active_lobby):
    with pytest.raises(InvalidStateTransition):
        RoundManager.start_next_round(store, "ABCDE")
    assert active_lobby.current_round == 1


@pytest.mark.asyncio
async def test_oversized_demand_still_resolves_player(store, active_lobby):
    estimator = StubEstimator(demand={"Acme": float("inf"), "Bolt": 1e308})
    acme = add_producing_player(active_lobby, "Acme", quantity=100)
    bolt = add_producing_player(active_lobby, "Bolt", quantity=40)
    active_lobby.launch_events = [make_event(demand=200)]

    await RoundManager.end_round(store, estimator, "ABCDE")

    assert acme.units_sold == 100
    assert bolt.units_sold == 40
    assert [len(p.round_history) for p in (acme, bolt)] == [1, 1]
    assert bolt.total_revenue == pytest.approx(40 * 20)
