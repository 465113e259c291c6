"""
並發控制工具

回合結算（end-round）是唯一需要互斥的操作：同一個 Lobby 同時只能有一個結算在跑，
否則營收會被重複計算。

使用 per-lobby 的 asyncio.Lock：
- 檢查 lock.locked() 與取得 lock 之間沒有 await，所以 check-and-set 是原子的
- 第二個同時進來的請求不會排隊等待，而是立刻拿到「已在執行中」的結果
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from core.lobby_store import LobbyStore


def get_lobby_lock(store: LobbyStore, code: str) -> asyncio.Lock:
    """
    取得（必要時建立）一個 Lobby 的結算鎖

    參數：
        store: LobbyStore
        code: Lobby code

    返回：
        asyncio.Lock（同一個 Lobby 永遠回傳同一把鎖）
    """
    lock = store.locks.get(code)
    if lock is None:
        lock = asyncio.Lock()
        store.locks[code] = lock
    return lock


@asynccontextmanager
async def try_lobby_lock(store: LobbyStore, code: str) -> AsyncIterator[bool]:
    """
    嘗試鎖定一個 Lobby（不等待）

    範例：
        async with try_lobby_lock(store, code) as acquired:
            if not acquired:
                return ignored_response
            # 結算...

    返回：
        True 表示取得鎖（離開 context 時自動釋放），False 表示已有結算在執行
    """
    lock = get_lobby_lock(store, code)
    if lock.locked():
        yield False
        return

    async with lock:
        yield True
