"""
事件修正服務：把 Host 宣告的市場事件轉成需求／成本的乘數

規則：
- 只看「本回合生效」、「已上新聞」、且目標公司為空或包含該玩家的事件
- 依宣告順序相乘（不是相加）
- 需求乘數歸零後立即返回，後面的事件不再影響
"""
from typing import List, Tuple

from models import LaunchEvent, Lobby, Player


def get_active_events(player: Player, lobby: Lobby) -> List[LaunchEvent]:
    """
    找出本回合對這個玩家生效的事件

    參數：
        player: 玩家
        lobby: 玩家所屬的 Lobby

    返回：
        事件列表（保持 Host 宣告的順序）
    """
    return [
        event for event in lobby.launch_events
        if event.in_news
        and event.effect_round == lobby.current_round
        and (not event.target_companies or player.name in event.target_companies)
    ]


def compute_modifiers(player: Player, lobby: Lobby) -> Tuple[float, float]:
    """
    計算需求乘數與成本乘數

    每個事件：
    1. demand_impact 存在時：demand *= max(0, 1 + impact / 100)
    2. demand 歸零時：直接返回 (0, 目前累積的 cost)
    3. cost_impact 存在時：cost *= 1 + impact / 100

    範例：
        demand_impact = -50             -> (0.5, 1.0)
        demand_impact = -50, -50        -> (0.25, 1.0)
        demand_impact = -100, cost = 20 -> (0.0, 1.0)   # 歸零的那個事件的成本不計入

    返回：
        (demand_modifier, cost_modifier)，demand_modifier 永遠 >= 0
    """
    demand_modifier = 1.0
    cost_modifier = 1.0

    for event in get_active_events(player, lobby):
        effects = event.effects

        if effects.demand_impact is not None:
            demand_modifier *= max(0.0, 1 + effects.demand_impact / 100)

        if demand_modifier <= 0:
            return 0.0, cost_modifier

        if effects.cost_impact is not None:
            cost_modifier *= 1 + effects.cost_impact / 100

    return demand_modifier, cost_modifier
