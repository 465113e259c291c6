"""
Lobby API Endpoints

職責：
1. Host 建立 Lobby、開始遊戲、清空審核佇列
2. 公司加入 Lobby
3. 查詢 Lobby 快照
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from config import Settings, get_settings
from schemas import (
    CompanyName,
    CompanyRequest,
    CreateLobbyRequest,
    CreateLobbyResponse,
    LobbyCodeRequest,
    LobbyResponse,
    LobbyStateResponse,
    SuccessResponse,
)
from core.lobby_manager import LobbyManager
from core.lobby_store import LobbyStore, get_store
from core.exceptions import InvalidHostCredential, InvalidStateTransition, LobbyNotFound
from services.history_service import build_leaderboard, leading_companies

router = APIRouter(tags=["lobbies"])
logger = logging.getLogger(__name__)


@router.post("/create-lobby", response_model=CreateLobbyResponse)
async def create_lobby(
    data: CreateLobbyRequest,
    store: LobbyStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    建立 Lobby（Host endpoint）

    前置條件：
    - 密碼必須等於 HOST_PASSWORD
    """
    try:
        lobby = LobbyManager.create_lobby(
            store, data.username, data.password, settings.host_password
        )
        return CreateLobbyResponse(lobby_code=lobby.code)

    except InvalidHostCredential:
        raise HTTPException(status_code=401, detail="Invalid password")
    except Exception as e:
        logger.error(f"Failed to create lobby: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/join-lobby", response_model=SuccessResponse)
async def join_lobby(
    data: CompanyRequest,
    store: LobbyStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    公司加入 Lobby（冪等：同名公司重複加入不會產生第二位玩家）
    """
    try:
        LobbyManager.join_lobby(
            store,
            data.lobby_code,
            data.company_name,
            settings.starting_budget,
            settings.starting_satisfaction,
        )
        return SuccessResponse()

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except Exception as e:
        logger.error(f"Failed to join lobby: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/start-game", response_model=SuccessResponse)
async def start_game(data: LobbyCodeRequest, store: LobbyStore = Depends(get_store)):
    """
    開始遊戲（Host endpoint）

    效果：
    - 狀態轉換 CREATED -> STARTED -> ROUND_ACTIVE
    - current_round = 1
    """
    try:
        LobbyManager.start_game(store, data.lobby_code)
        return SuccessResponse()

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except InvalidStateTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to start game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/check-lobby", response_model=SuccessResponse)
async def check_lobby(data: LobbyCodeRequest, store: LobbyStore = Depends(get_store)):
    try:
        LobbyManager.get_lobby(store, data.lobby_code)
        return SuccessResponse()

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")


@router.post("/clear-pending", response_model=SuccessResponse)
async def clear_pending(data: LobbyCodeRequest, store: LobbyStore = Depends(get_store)):
    try:
        LobbyManager.clear_pending(store, data.lobby_code)
        return SuccessResponse()

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")


@router.get("/lobby/{code}", response_model=LobbyResponse)
async def get_lobby(code: str, store: LobbyStore = Depends(get_store)):
    """
    Lobby 完整快照（Host 與玩家畫面）

    返回：
        - players: 所有公司完整資料
        - leadingCompanies: 本回合營收前 5 名
        - leaderboard: 每間公司的本回合與累計數值
    """
    try:
        lobby = LobbyManager.get_lobby(store, code)
        return LobbyResponse(
            current_round=lobby.current_round,
            players=lobby.players,
            game_started=lobby.game_started,
            pending_products=lobby.pending_products,
            round_started=lobby.round_started,
            round_ended=lobby.round_ended,
            leading_companies=leading_companies(lobby),
            leaderboard=build_leaderboard(lobby),
        )

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
    except Exception as e:
        logger.error(f"Failed to get lobby: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/lobby-state/{code}", response_model=LobbyStateResponse)
async def get_lobby_state(code: str, store: LobbyStore = Depends(get_store)):
    try:
        lobby = LobbyManager.get_lobby(store, code)
        return LobbyStateResponse(
            current_round=lobby.current_round,
            players=[CompanyName(company_name=p.name) for p in lobby.players],
            game_started=lobby.game_started,
            round_started=lobby.round_started,
            round_ended=lobby.round_ended,
        )

    except LobbyNotFound:
        raise HTTPException(status_code=404, detail="Lobby not found")
