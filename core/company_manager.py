"""
Company Manager：玩家（公司）在回合中的提交動作

職責：
1. 產品申請、Host 核准／拒絕
2. 行銷策略
3. 確認生產計畫
4. 請求結束回合
"""
import logging
from typing import Any, Dict, Optional

from models import PendingProduct, Player, ProductRequest, ProductStatus, ProductionPlan
from core.exceptions import NoPendingProduct
from core.lobby_manager import LobbyManager
from core.lobby_store import LobbyStore

logger = logging.getLogger(__name__)

DEFAULT_REFUSE_REASON = "No reason provided"


class CompanyManager:
    """公司提交動作管理器"""

    @staticmethod
    def submit_product(
        store: LobbyStore,
        code: str,
        company_name: str,
        product: ProductRequest,
    ) -> Player:
        """
        提交產品申請

        效果：
        - 成為公司目前的產品申請（狀態 waiting）
        - 加入 Host 的審核佇列
        """
        lobby = store.get(code)
        player = LobbyManager.get_player(store, code, company_name)

        player.products.append(product)
        player.product_request = product
        player.product_status = ProductStatus.WAITING
        player.rejection_reason = ""

        lobby.pending_products.append(PendingProduct(
            company_name=company_name,
            **product.model_dump(),
        ))

        logger.info(f"{company_name} submitted product {product.product_name} in lobby {code}")
        return player

    @staticmethod
    def approve_product(store: LobbyStore, code: str, company_name: str) -> Player:
        """
        核准審核佇列中最早的一筆申請

        異常：
            NoPendingProduct: 佇列中沒有這間公司的申請
        """
        lobby = store.get(code)

        index = next(
            (i for i, p in enumerate(lobby.pending_products) if p.company_name == company_name),
            None,
        )
        if index is None:
            raise NoPendingProduct(company_name)

        approved = lobby.pending_products.pop(index)
        player = LobbyManager.get_player(store, code, company_name)
        player.product_status = ProductStatus.APPROVED
        player.product_request = ProductRequest(
            **approved.model_dump(exclude={"company_name"})
        )
        player.rejection_reason = ""

        logger.info(f"Approved product {approved.product_name} for {company_name} in lobby {code}")
        return player

    @staticmethod
    def refuse_product(
        store: LobbyStore,
        code: str,
        company_name: str,
        reason: Optional[str],
    ) -> Player:
        """拒絕申請：從佇列移除該公司所有申請，並記錄理由"""
        lobby = store.get(code)
        player = LobbyManager.get_player(store, code, company_name)

        lobby.pending_products = [
            p for p in lobby.pending_products if p.company_name != company_name
        ]
        player.product_status = ProductStatus.REFUSED
        player.rejection_reason = reason or DEFAULT_REFUSE_REASON

        logger.info(f"Refused product for {company_name} in lobby {code}: {player.rejection_reason}")
        return player

    @staticmethod
    def submit_marketing(
        store: LobbyStore,
        code: str,
        company_name: str,
        strategy: Dict[str, Any],
    ) -> Player:
        player = LobbyManager.get_player(store, code, company_name)
        player.marketing_strategy = strategy
        player.active_campaigns.append(strategy)
        logger.info(f"{company_name} submitted marketing strategy in lobby {code}")
        return player

    @staticmethod
    def confirm_production(
        store: LobbyStore,
        code: str,
        company_name: str,
        plan: ProductionPlan,
    ) -> Player:
        """
        確認生產計畫

        計畫同時存在玩家身上與 Lobby 的 productions 表；
        回合結算成功後兩邊都會被清掉（只能用一次）
        """
        lobby = store.get(code)
        player = LobbyManager.get_player(store, code, company_name)

        player.production_confirmed = plan
        lobby.productions[company_name] = plan

        logger.info(
            f"Production stored for {company_name} in lobby {code}: "
            f"{plan.quantity} units at {plan.price_per_unit} in {plan.region or 'unknown region'}"
        )
        return player

    @staticmethod
    def request_end_round(store: LobbyStore, code: str, company_name: str) -> Player:
        player = LobbyManager.get_player(store, code, company_name)
        player.request_end_round = True
        logger.info(f"{company_name} requested end of round in lobby {code}")
        return player
