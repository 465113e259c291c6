"""
Round API Endpoints

重點：
1. end-round 冪等：同一 Lobby 同時只會結算一次，重複呼叫回傳 ignored=true
2. 所有業務邏輯集中在 RoundManager
3. 前端靠 /round-state 短輪詢得知回合狀態
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from schemas import EndRoundResponse, LobbyCodeRequest, RoundStateResponse, SuccessResponse
from core.round_manager import RoundManager
from core.lobby_manager import LobbyManager
from core.lobby_store import LobbyStore, get_store
from core.exceptions import InvalidStateTransition, LobbyNotFound
from services.estimator import Estimator, get_estimator

router = APIRouter(tags=["rounds"])
logger = logging.getLogger(__name__)


@router.post("/end-round", response_model=EndRoundResponse)
async def end_round(
    data: LobbyCodeRequest,
    store: LobbyStore = Depends(get_store),
    estimator: Estimator = Depends(get_estimator),
):
    """
    結束回合並結算（Host endpoint）

    **並發安全**：
    - per-lobby lock 確保不會重複計算
    - 已在結算中或已結束的回合回傳 ignored=true（不是錯誤）

    **部分失敗**：
    - 單一玩家的 Estimator 失敗只會讓該玩家數值維持不變
    - 這個 endpoint 本身不會因為 Estimator 失敗而回傳錯誤

    返回：
        - success: true
        - ignored: 是否被忽略
        - players: 所有公司（結算後）
    """
    try:
        result = await RoundManager.end_round(store, estimator, data.lobby_code)
        return EndRoundResponse(ignored=result.ignored, players=result.players)

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except InvalidStateTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to end round: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/start-next-round", response_model=SuccessResponse)
async def start_next_round(data: LobbyCodeRequest, store: LobbyStore = Depends(get_store)):
    """
    開始下一回合（Host endpoint）

    前置條件：
    - 當前回合必須已結束（ROUND_ENDED）
    """
    try:
        RoundManager.start_next_round(store, data.lobby_code)
        return SuccessResponse()

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except InvalidStateTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to start next round: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/round-state/{code}", response_model=RoundStateResponse)
async def get_round_state(code: str, store: LobbyStore = Depends(get_store)):
    try:
        lobby = LobbyManager.get_lobby(store, code)
        return RoundStateResponse(
            current_round=lobby.current_round,
            round_started=lobby.round_started,
            round_ended=lobby.round_ended,
            resolution_in_progress=lobby.resolution_in_progress,
        )

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
