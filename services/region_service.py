"""
區域服務：把事件或生產計畫上的區域名稱對應到成本模型使用的固定區域

純查表，不涉及狀態
"""
from typing import NamedTuple, Optional


class RegionCosts(NamedTuple):
    wage: float
    factory_rent: float
    warehouse_rent: float
    energy: float


REGION_COSTS = {
    "RegionA": RegionCosts(wage=25, factory_rent=12, warehouse_rent=8, energy=0.25),
    "RegionB": RegionCosts(wage=18, factory_rent=8, warehouse_rent=5, energy=0.18),
    "RegionC": RegionCosts(wage=30, factory_rent=15, warehouse_rent=10, energy=0.3),
}

REGION_ALIASES = {
    "A": "RegionA",
    "B": "RegionB",
    "C": "RegionC",

    "Western Europe": "RegionA",
    "Nordics": "RegionA",
    "Anglosphere": "RegionA",

    "Southern Europe": "RegionB",
    "Eastern Europe": "RegionB",
    "Latin America": "RegionB",

    "East Asia": "RegionC",
    "China": "RegionC",
    "South & Southeast Asia": "RegionC",
    "Middle East": "RegionC",
}

CHEAP_WAGE_LIMIT = 20
AVERAGE_WAGE_LIMIT = 28
DEFAULT_COST_LEVEL = "expensive"


def normalize_region(raw: Optional[str]) -> Optional[str]:
    """
    區域別名 -> 固定區域 key

    範例：
        normalize_region("B") -> "RegionB"
        normalize_region("Nordics") -> "RegionA"
        normalize_region("RegionC") -> "RegionC"
        normalize_region("Atlantis") -> None
    """
    if not raw:
        return None
    name = raw.strip()
    if name in REGION_COSTS:
        return name
    return REGION_ALIASES.get(name)


def get_region_costs(raw: Optional[str]) -> Optional[RegionCosts]:
    region = normalize_region(raw)
    if region is None:
        return None
    return REGION_COSTS[region]


def classify_cost_level(costs: Optional[RegionCosts]) -> str:
    """
    依工資把區域分成 cheap / average / expensive

    找不到區域成本時退回預設等級，不拋出異常
    """
    if costs is None:
        return DEFAULT_COST_LEVEL
    if costs.wage < CHEAP_WAGE_LIMIT:
        return "cheap"
    if costs.wage < AVERAGE_WAGE_LIMIT:
        return "average"
    return "expensive"
