"""
Lobby 狀態機：集中管理所有 Lobby 狀態轉換

狀態流程：
    CREATED -> STARTED -> ROUND_ACTIVE -> ROUND_RESOLVING -> ROUND_ENDED
                              ^                                  |
                              +----------------------------------+

沒有終止狀態，回合會一直循環直到程序結束。
所有狀態變更都必須經過 LobbyStateMachine.transition()，不要直接改 lobby.status。
"""
import logging

from models import Lobby, LobbyStatus
from core.exceptions import InvalidStateTransition

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS = {
    LobbyStatus.CREATED: {LobbyStatus.STARTED},
    LobbyStatus.STARTED: {LobbyStatus.ROUND_ACTIVE},
    LobbyStatus.ROUND_ACTIVE: {LobbyStatus.ROUND_RESOLVING},
    LobbyStatus.ROUND_RESOLVING: {LobbyStatus.ROUND_ENDED},
    LobbyStatus.ROUND_ENDED: {LobbyStatus.ROUND_ACTIVE},
}


class LobbyStateMachine:
    """Lobby 狀態機"""

    @staticmethod
    def can_transition(current: LobbyStatus, target: LobbyStatus) -> bool:
        return target in ALLOWED_TRANSITIONS.get(current, set())

    @staticmethod
    def transition(lobby: Lobby, target: LobbyStatus) -> Lobby:
        """
        轉換 Lobby 狀態

        參數：
            lobby: 要轉換的 Lobby
            target: 目標狀態

        返回：
            同一個 Lobby（已更新狀態）

        異常：
            InvalidStateTransition: 轉換不在 ALLOWED_TRANSITIONS 內
        """
        current = lobby.status
        if not LobbyStateMachine.can_transition(current, target):
            raise InvalidStateTransition(
                f"Lobby {lobby.code} cannot go from {current.value} to {target.value}"
            )

        lobby.status = target
        logger.info(f"Lobby {lobby.code}: {current.value} -> {target.value}")
        return lobby
