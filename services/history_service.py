"""
Player history service.

Read-side helpers over the round history and current metrics: last round's
units for scarcity context, the leaderboard and top companies for the lobby
snapshot, and per-company reviews.
"""
from typing import Any, Dict, List

from models import Lobby, Player

LEADING_COMPANIES_LIMIT = 5


def last_units_sold(player: Player) -> int:
    """Units sold in the most recent resolved round, 0 before the first one."""
    if not player.round_history:
        return 0
    return player.round_history[-1].units_sold


def leading_companies(lobby: Lobby, limit: int = LEADING_COMPANIES_LIMIT) -> List[Dict[str, Any]]:
    """Top companies by this round's revenue."""
    ranked = sorted(lobby.players, key=lambda p: p.revenue, reverse=True)
    return [
        {
            "name": p.name,
            "revenue": p.revenue,
            "profit": p.profit,
            "unitsSold": p.units_sold,
        }
        for p in ranked[:limit]
    ]


def build_leaderboard(lobby: Lobby) -> List[Dict[str, Any]]:
    """
    One entry per company, in join order.

    Each entry carries the round values, the game totals and the product the
    company is currently selling so the host screen can render it directly.
    """
    leaderboard: List[Dict[str, Any]] = []

    for player in lobby.players:
        product = player.product_request or (player.products[-1] if player.products else None)

        leaderboard.append({
            "name": player.name,

            "revenue": player.revenue,
            "profit": player.profit,
            "unitsSold": player.units_sold,
            "revenuePerUnit": player.revenue_per_unit,

            "totalRevenue": player.total_revenue,
            "totalProfit": player.total_profit,
            "totalUnitsSold": player.total_units_sold,

            "satisfaction": player.satisfaction,
            "demand": player.demand,
            "sustainabilityScore": player.sustainability_score,
            "aiFeedback": player.ai_feedback,

            "productName": product.product_name if product else None,
            "productDescription": product.description if product else None,
        })

    return leaderboard


def reviews_by_round(player: Player) -> Dict[int, List[Dict[str, Any]]]:
    return {
        round_number: [review.model_dump(by_alias=True) for review in reviews]
        for round_number, reviews in player.reviews_by_round.items()
    }
