"""
Company API Endpoints

職責：
1. 產品申請、Host 核准／拒絕
2. 行銷策略、生產計畫
3. 請求結束回合
4. 查詢公司評論
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from models import ProductRequest
from schemas import (
    CompanyRequest,
    ConfirmProductionRequest,
    RefuseProductRequest,
    ReviewsResponse,
    SubmitMarketingRequest,
    SubmitProductRequest,
    SuccessResponse,
)
from core.company_manager import CompanyManager
from core.lobby_manager import LobbyManager
from core.lobby_store import LobbyStore, get_store
from core.exceptions import LobbyNotFound, NoPendingProduct, PlayerNotFound
from services.history_service import reviews_by_round

router = APIRouter(tags=["companies"])
logger = logging.getLogger(__name__)


@router.post("/submit-product", response_model=SuccessResponse)
async def submit_product(data: SubmitProductRequest, store: LobbyStore = Depends(get_store)):
    try:
        product = ProductRequest(
            product_name=data.product_name,
            description=data.description,
            placement=data.placement,
        )
        CompanyManager.submit_product(store, data.lobby_code, data.company_name, product)
        return SuccessResponse()

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    except Exception as e:
        logger.error(f"Failed to submit product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/approve-product", response_model=SuccessResponse)
async def approve_product(data: CompanyRequest, store: LobbyStore = Depends(get_store)):
    """
    核准產品（Host endpoint）

    前置條件：
    - 審核佇列中必須有這間公司的申請
    """
    try:
        CompanyManager.approve_product(store, data.lobby_code, data.company_name)
        return SuccessResponse()

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    except NoPendingProduct:
        raise HTTPException(status_code=400, detail="No pending product")
    except Exception as e:
        logger.error(f"Failed to approve product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/refuse-product", response_model=SuccessResponse)
async def refuse_product(data: RefuseProductRequest, store: LobbyStore = Depends(get_store)):
    try:
        CompanyManager.refuse_product(store, data.lobby_code, data.company_name, data.reason)
        return SuccessResponse()

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    except Exception as e:
        logger.error(f"Failed to refuse product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/submit-marketing", response_model=SuccessResponse)
async def submit_marketing(data: SubmitMarketingRequest, store: LobbyStore = Depends(get_store)):
    try:
        CompanyManager.submit_marketing(store, data.lobby_code, data.company_name, data.strategy)
        return SuccessResponse()

    except (LobbyNotFound, PlayerNotFound):
        raise HTTPException(status_code=404, detail="Player not found")
    except Exception as e:
        logger.error(f"Failed to submit marketing: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/confirm-production", response_model=SuccessResponse)
async def confirm_production(data: ConfirmProductionRequest, store: LobbyStore = Depends(get_store)):
    """
    確認生產計畫

    計畫會在下一次回合結算時被使用，結算成功後清除
    """
    try:
        CompanyManager.confirm_production(
            store, data.lobby_code, data.company_name, data.production
        )
        return SuccessResponse()

    except (LobbyNotFound, PlayerNotFound):
        raise HTTPException(status_code=404, detail="Player not found")
    except Exception as e:
        logger.error(f"Failed to confirm production: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/request-end-round", response_model=SuccessResponse)
async def request_end_round(data: CompanyRequest, store: LobbyStore = Depends(get_store)):
    try:
        CompanyManager.request_end_round(store, data.lobby_code, data.company_name)
        return SuccessResponse()

    except (LobbyNotFound, PlayerNotFound):
        raise HTTPException(status_code=404, detail="Player not found")


@router.get("/reviews/{lobby_code}/{company_name}", response_model=ReviewsResponse)
async def get_reviews(lobby_code: str, company_name: str, store: LobbyStore = Depends(get_store)):
    """
    取得一間公司每回合的市場評論

    返回：
        - currentRound: 目前回合
        - reviewsByRound: {回合: [評論]}
    """
    try:
        lobby = LobbyManager.get_lobby(store, lobby_code)
        player = LobbyManager.get_player(store, lobby_code, company_name)
        return ReviewsResponse(
            current_round=lobby.current_round,
            reviews_by_round=reviews_by_round(player),
        )

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
