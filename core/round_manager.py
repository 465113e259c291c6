"""
Round Manager：回合結算與回合推進

職責：
1. end_round：鎖定 Lobby -> 逐一結算玩家 -> 生成新聞 -> ROUND_ENDED
2. resolve_player：單一玩家的結算（失敗只影響該玩家）
3. start_next_round：ROUND_ENDED -> ROUND_ACTIVE，回合數 +1

並發安全：
- 同一個 Lobby 同時只會有一個 end_round 在跑（core/locks.py）
- 第二個同時進來的請求直接回傳 ignored=True，不重複計算營收
- 玩家依序結算，每次 Estimator 呼叫都 await 完才處理下一位
"""
import logging
from typing import List, NamedTuple

from models import Lobby, LobbyStatus, Player
from core.lobby_store import LobbyStore
from core.locks import try_lobby_lock
from core.state_machine import LobbyStateMachine
from services.estimator import Estimator
from services.event_modifier_service import compute_modifiers
from services.news_service import generate_round_news
from services.outcome_service import apply_outcome, build_demand_context, calculate_outcome

logger = logging.getLogger(__name__)


class EndRoundResult(NamedTuple):
    ignored: bool
    players: List[Player]


class RoundManager:
    """回合生命週期管理器"""

    @staticmethod
    async def end_round(store: LobbyStore, estimator: Estimator, code: str) -> EndRoundResult:
        """
        結束當前回合並結算所有玩家

        流程：
        1. 嘗試取得 Lobby 結算鎖；拿不到 -> ignored
        2. 已經是 ROUND_ENDED -> ignored（冪等）
        3. ROUND_ACTIVE -> ROUND_RESOLVING
        4. 依序結算每位玩家（單一玩家失敗不影響其他人）
        5. 生成回合新聞
        6. ROUND_RESOLVING -> ROUND_ENDED（finally，確保一定釋放）

        異常：
            LobbyNotFound: Lobby 不存在
            InvalidStateTransition: 遊戲尚未開始
        """
        lobby = store.get(code)

        async with try_lobby_lock(store, code) as acquired:
            if not acquired:
                logger.warning(f"End round already running for lobby {code}")
                return EndRoundResult(ignored=True, players=lobby.players)

            if lobby.status == LobbyStatus.ROUND_ENDED:
                logger.warning(f"Round {lobby.current_round} already ended for lobby {code}")
                return EndRoundResult(ignored=True, players=lobby.players)

            LobbyStateMachine.transition(lobby, LobbyStatus.ROUND_RESOLVING)
            try:
                resolved = 0
                for player in list(lobby.players):
                    if await RoundManager.resolve_player(lobby, player, estimator):
                        resolved += 1

                logger.info(
                    f"Resolved {resolved}/{len(lobby.players)} companies "
                    f"for lobby {code}, round {lobby.current_round}"
                )

                await generate_round_news(store, lobby, estimator)
            finally:
                LobbyStateMachine.transition(lobby, LobbyStatus.ROUND_ENDED)

        return EndRoundResult(ignored=False, players=lobby.players)

    @staticmethod
    async def resolve_player(lobby: Lobby, player: Player, estimator: Estimator) -> bool:
        """
        結算單一玩家

        跳過條件（不是錯誤，玩家數值維持不變）：
        - 沒有確認的生產計畫
        - 沒有產品申請
        - Lobby 的 productions 表中沒有這間公司

        所有數值先算完才寫回玩家；中途失敗時玩家保持上一回合的數值。

        返回：
            True 如果玩家被結算，False 如果跳過或失敗
        """
        if not player.production_confirmed or not player.product_request:
            return False

        plan = lobby.productions.get(player.name)
        if plan is None:
            logger.warning(f"No production for {player.name} in lobby {lobby.code}")
            return False

        try:
            context = build_demand_context(player, plan)
            result = await estimator.estimate_demand(context)

            demand_modifier, cost_modifier = compute_modifiers(player, lobby)
            logger.info(
                f"Active events for {player.name} (round {lobby.current_round}): "
                f"demand x{demand_modifier}, cost x{cost_modifier}"
            )

            outcome = calculate_outcome(
                result.absolute_demand, plan, demand_modifier, cost_modifier
            )
            apply_outcome(player, lobby.current_round, plan, outcome, result)
            lobby.productions.pop(player.name, None)

        except Exception as e:
            logger.error(
                f"Round resolution failed for {player.name} in lobby {lobby.code}: {e}",
                exc_info=True,
            )
            return False

        logger.info(
            f"{player.name}: sold {outcome.units_sold}/{plan.quantity} units, "
            f"revenue {outcome.revenue}, profit {outcome.profit}"
        )
        return True

    @staticmethod
    def start_next_round(store: LobbyStore, code: str) -> Lobby:
        """
        開始下一回合（ROUND_ENDED -> ROUND_ACTIVE）

        唯一會推進回合數的操作：
        - current_round += 1
        - 重設每位玩家的結束回合請求與本回合行銷活動

        異常：
            LobbyNotFound: Lobby 不存在
            InvalidStateTransition: 當前回合尚未結束
        """
        lobby = store.get(code)

        LobbyStateMachine.transition(lobby, LobbyStatus.ROUND_ACTIVE)
        lobby.current_round += 1
        for player in lobby.players:
            player.request_end_round = False
            player.active_campaigns = []

        logger.info(f"Lobby {code} started round {lobby.current_round}")
        return lobby
