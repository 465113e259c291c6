"""
Lobby Store：常駐記憶體的 Lobby 註冊表

職責：
1. 保存所有 Lobby（以 lobby code 為 key）
2. 保存每個 Lobby 的新聞時間軸
3. 保存每個 Lobby 的結算鎖（見 core/locks.py）

程序啟動時建立一次（main.py lifespan），透過 FastAPI dependency 注入，
不使用模組層級的全域變數。狀態不落地，程序結束即消失。
"""
import asyncio
import logging
from typing import Dict, List

from fastapi import Request

from models import Lobby, NewsArticle
from core.exceptions import LobbyNotFound

logger = logging.getLogger(__name__)


class LobbyStore:
    """所有 Lobby 的容器，沒有業務邏輯"""

    def __init__(self):
        self.lobbies: Dict[str, Lobby] = {}
        self.news: Dict[str, List[NewsArticle]] = {}
        self.locks: Dict[str, asyncio.Lock] = {}

    def __contains__(self, code: str) -> bool:
        return code in self.lobbies

    def get(self, code: str) -> Lobby:
        """
        取得 Lobby

        異常：
            LobbyNotFound: Lobby 不存在
        """
        lobby = self.lobbies.get(code)
        if lobby is None:
            raise LobbyNotFound(code)
        return lobby

    def create(self, lobby: Lobby) -> Lobby:
        self.lobbies[lobby.code] = lobby
        self.news[lobby.code] = []
        logger.info(f"Stored lobby {lobby.code}")
        return lobby

    def delete(self, code: str) -> None:
        self.lobbies.pop(code, None)
        self.news.pop(code, None)
        self.locks.pop(code, None)
        logger.info(f"Deleted lobby {code}")

    def news_for(self, code: str) -> List[NewsArticle]:
        return self.news.setdefault(code, [])


def get_store(request: Request) -> LobbyStore:
    """FastAPI dependency：取得程序內唯一的 LobbyStore"""
    return request.app.state.store
