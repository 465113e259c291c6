"""
Lobby Manager：管理 Lobby 的建立、加入、開始遊戲與 Host 事件

職責：
1. 建立 Lobby（驗證 Host 密碼）
2. 公司加入 Lobby
3. 開始遊戲（狀態轉換 + 初始化回合）
4. Host 的產品審核佇列與 Launch Event

原則：
- 單一職責：只管 Lobby，不管回合結算
- 所有狀態變更經過 LobbyStateMachine
"""
import logging
import secrets
from typing import List, Optional

from models import LaunchEvent, Lobby, LobbyStatus, Player
from core.exceptions import InvalidHostCredential, PlayerNotFound
from core.lobby_store import LobbyStore
from core.state_machine import LobbyStateMachine
from services.naming_service import generate_lobby_code
from services.news_service import sync_launch_events

logger = logging.getLogger(__name__)


class LobbyManager:
    """Lobby 生命週期管理器"""

    @staticmethod
    def create_lobby(
        store: LobbyStore,
        username: str,
        password: Optional[str],
        host_password: Optional[str],
    ) -> Lobby:
        """
        建立新 Lobby

        流程：
        1. 驗證 Host 密碼（沒有設定密碼時一律拒絕）
        2. 生成唯一的 Lobby code
        3. 存入 LobbyStore

        異常：
            InvalidHostCredential: 密碼錯誤
        """
        if not host_password or not password or not secrets.compare_digest(
            password.encode(), host_password.encode()
        ):
            raise InvalidHostCredential("Invalid password")

        code = generate_lobby_code()
        while code in store:
            logger.warning(f"Lobby code collision detected, regenerating: {code}")
            code = generate_lobby_code()

        lobby = store.create(Lobby(code=code, host=username))
        logger.info(f"Created lobby {code} for host {username}")
        return lobby

    @staticmethod
    def join_lobby(
        store: LobbyStore,
        code: str,
        company_name: str,
        starting_budget: float,
        starting_satisfaction: float,
    ) -> Player:
        """
        公司加入 Lobby

        冪等：同名公司重複加入會直接回傳既有的 Player

        異常：
            LobbyNotFound: Lobby 不存在
        """
        lobby = store.get(code)

        existing = lobby.find_player(company_name)
        if existing:
            logger.info(f"Company {company_name} rejoined lobby {code}")
            return existing

        player = Player(
            name=company_name,
            budget=starting_budget,
            satisfaction=starting_satisfaction,
        )
        lobby.players.append(player)
        logger.info(f"Company {company_name} joined lobby {code}")
        return player

    @staticmethod
    def start_game(store: LobbyStore, code: str) -> Lobby:
        """
        開始遊戲（CREATED -> STARTED -> ROUND_ACTIVE）

        效果：
        - current_round = 1
        - 所有玩家的結束回合請求歸零

        異常：
            LobbyNotFound: Lobby 不存在
            InvalidStateTransition: 遊戲已經開始
        """
        lobby = store.get(code)

        LobbyStateMachine.transition(lobby, LobbyStatus.STARTED)
        lobby.current_round = 1
        for player in lobby.players:
            player.request_end_round = False
        LobbyStateMachine.transition(lobby, LobbyStatus.ROUND_ACTIVE)

        logger.info(f"Game started for lobby {code} with {len(lobby.players)} companies")
        return lobby

    @staticmethod
    def get_lobby(store: LobbyStore, code: str) -> Lobby:
        return store.get(code)

    @staticmethod
    def get_player(store: LobbyStore, code: str, company_name: str) -> Player:
        """
        異常：
            LobbyNotFound: Lobby 不存在
            PlayerNotFound: 公司不存在
        """
        player = store.get(code).find_player(company_name)
        if not player:
            raise PlayerNotFound(company_name)
        return player

    @staticmethod
    def clear_pending(store: LobbyStore, code: str) -> None:
        lobby = store.get(code)
        lobby.pending_products = []
        logger.info(f"Cleared pending products for lobby {code}")

    @staticmethod
    def apply_launch_events(store: LobbyStore, code: str, events: List[LaunchEvent]) -> Lobby:
        """
        整批取代 Lobby 的 Launch Events，並同步到新聞時間軸

        注意：
            新聞時間軸只會新增；被取代掉的事件若已上過新聞，文章仍會保留
        """
        lobby = store.get(code)
        lobby.launch_events = list(events)
        sync_launch_events(store, lobby)
        logger.info(f"Applied {len(events)} launch events to lobby {code}")
        return lobby
