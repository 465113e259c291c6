"""
News API Endpoints

職責：
1. Host 套用 Launch Events（同時同步到新聞時間軸）
2. 查詢 Lobby 新聞時間軸
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from schemas import ApplyLaunchEventsRequest, NewsResponse, SuccessResponse
from core.lobby_manager import LobbyManager
from core.lobby_store import LobbyStore, get_store
from core.exceptions import LobbyNotFound

router = APIRouter(tags=["news"])
logger = logging.getLogger(__name__)


@router.post("/apply-launch-events", response_model=SuccessResponse)
async def apply_launch_events(
    data: ApplyLaunchEventsRequest,
    store: LobbyStore = Depends(get_store),
):
    """
    套用 Host 事件（Host endpoint）

    效果：
    - 整批取代 Lobby 的 Launch Events
    - in_news 的事件鏡像到新聞時間軸（依 id 去重）
    """
    try:
        LobbyManager.apply_launch_events(store, data.lobby_code, data.events)
        return SuccessResponse()

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except Exception as e:
        logger.error(f"Failed to apply launch events: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/news-events/{lobby_code}", response_model=NewsResponse)
async def get_news_events(lobby_code: str, store: LobbyStore = Depends(get_store)):
    try:
        lobby = LobbyManager.get_lobby(store, lobby_code)
        return NewsResponse(
            current_round=lobby.current_round,
            news=store.news_for(lobby_code),
        )

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
