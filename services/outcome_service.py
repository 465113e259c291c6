"""
結算服務：把生產計畫 + 估算需求 轉成 賣出量、營收、利潤

純計算邏輯 + 對單一玩家的欄位更新；不負責狀態轉換（由 RoundManager 負責）
"""
import math
from typing import Any, Dict, NamedTuple

from models import Player, ProductionPlan, Review, RoundHistoryEntry
from services.estimator import DemandContext, DemandResult
from services.history_service import last_units_sold
from services.region_service import classify_cost_level, get_region_costs
from services.scarcity_service import classify_scarcity

BASE_COST_RATIO = 0.6
MARKETING_PRESSURE_FACTOR = 0.85
SATISFACTION_MIN = 0
SATISFACTION_MAX = 100


class RoundOutcome(NamedTuple):
    modified_demand: int
    units_sold: int
    unit_cost: float
    revenue: float
    profit: float


def coerce_demand(value: Any) -> float:
    """
    Estimator 給的需求值不可信：轉成數字、小於 0 視為 0、非數字視為 0
    無限大保留（代表需求沒有上限，結算時直接賣完庫存）

    範例：
        coerce_demand(1523) -> 1523.0
        coerce_demand("88") -> 88.0
        coerce_demand(-40) -> 0.0
        coerce_demand("lots") -> 0.0
        coerce_demand("1e999") -> inf
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        demand = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(demand):
        return 0.0
    return max(0.0, demand)


def marketing_pressure(strategy: Dict[str, Any]) -> float:
    """
    行銷壓力（log 尺度）：0.85 * log10(max(1, budget))，取到小數點後兩位

    budget 缺少或不是數字時視為 1（壓力 0）
    """
    budget = (strategy or {}).get("budget")
    try:
        budget = float(budget) if budget else 1.0
    except (TypeError, ValueError):
        budget = 1.0
    if not math.isfinite(budget):
        budget = 1.0
    return round(math.log10(max(1.0, budget)) * MARKETING_PRESSURE_FACTOR, 2)


def build_demand_context(player: Player, plan: ProductionPlan) -> DemandContext:
    """
    組出送給 Estimator 的市場背景

    稀缺度用「本回合計畫產量」對比「上一回合賣出量」
    """
    previous_units = last_units_sold(player)
    product = player.product_request

    return DemandContext(
        company_name=player.name,
        product_name=product.product_name,
        product_description=product.description,
        price_per_unit=plan.price_per_unit,
        units_available=plan.quantity,
        units_sold_last_round=previous_units,
        scarcity=classify_scarcity(plan.quantity, previous_units),
        sustainability_claim=plan.sustainability.value,
        region_cost_level=classify_cost_level(get_region_costs(plan.region)),
        marketing_pressure=marketing_pressure(player.marketing_strategy),
        marketing_strategy=player.marketing_strategy,
    )


def calculate_outcome(
    raw_demand: Any,
    plan: ProductionPlan,
    demand_modifier: float,
    cost_modifier: float,
) -> RoundOutcome:
    """
    計算一個玩家本回合的結果

    公式：
        modified_demand = floor(max(0, raw_demand * demand_modifier))
        units_sold      = min(modified_demand, quantity)      # 賣不超過庫存，多的需求直接流失
        unit_cost       = price * 0.6 * cost_modifier
        revenue         = units_sold * price
        profit          = revenue - units_sold * unit_cost    # 可以是負數

    需求乘上事件後變成無限大（溢位）時：賣完全部庫存，modified_demand 記為 quantity

    範例：
        quantity=100, price=20, raw_demand=150, 沒有事件
        -> units_sold=100, revenue=2000, unit_cost=12, profit=800
    """
    demand = coerce_demand(raw_demand)
    scaled_demand = demand * demand_modifier if demand_modifier > 0 else 0.0
    if math.isfinite(scaled_demand):
        modified_demand = math.floor(max(0.0, scaled_demand))
        units_sold = min(modified_demand, plan.quantity)
    else:
        modified_demand = plan.quantity
        units_sold = plan.quantity

    unit_cost = plan.price_per_unit * BASE_COST_RATIO * cost_modifier
    revenue = units_sold * plan.price_per_unit
    profit = revenue - units_sold * unit_cost

    return RoundOutcome(
        modified_demand=modified_demand,
        units_sold=units_sold,
        unit_cost=unit_cost,
        revenue=revenue,
        profit=profit,
    )


def apply_outcome(
    player: Player,
    round_number: int,
    plan: ProductionPlan,
    outcome: RoundOutcome,
    result: DemandResult,
) -> None:
    """
    把結算結果寫回玩家

    副作用：
        - 更新當回合數值、回合歷史、累計數值、預算、滿意度、永續分數
        - 保存 AI 摘要與本回合評論
        - 清掉已確認的生產計畫（只能用一次）
    """
    player.units_sold = outcome.units_sold
    player.demand = outcome.modified_demand
    player.revenue = outcome.revenue
    player.profit = outcome.profit
    player.revenue_per_unit = plan.price_per_unit

    player.round_history.append(RoundHistoryEntry(
        round=round_number,
        revenue=outcome.revenue,
        profit=outcome.profit,
        units_sold=outcome.units_sold,
    ))

    player.total_units_sold += outcome.units_sold
    player.total_revenue += outcome.revenue
    player.total_profit += outcome.profit
    player.budget += outcome.profit

    player.satisfaction = max(
        SATISFACTION_MIN,
        min(SATISFACTION_MAX, player.satisfaction + result.satisfaction_delta),
    )
    if result.sustainability_score is not None:
        player.sustainability_score = result.sustainability_score

    player.ai_feedback = result.summary
    player.reviews_by_round[round_number] = [
        Review(
            id=index,
            sentiment=review.sentiment,
            text=review.text,
            company=player.name,
            round=round_number,
        )
        for index, review in enumerate(result.reviews)
    ]

    player.production_confirmed = None
