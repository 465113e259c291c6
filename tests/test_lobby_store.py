import pytest

from core.exceptions import LobbyNotFound
from core.locks import get_lobby_lock
from models import Lobby, NewsArticle


def test_get_unknown_lobby(store):
    with pytest.raises(LobbyNotFound):
        store.get("NOPE0")


def test_delete_removes_lobby_news_and_lock(store):
    store.create(Lobby(code="GONE1", host="host"))
    store.news_for("GONE1").append(NewsArticle(id="e1", title="Hello"))
    get_lobby_lock(store, "GONE1")
    store.create(Lobby(code="KEEP1", host="host"))

    store.delete("GONE1")

    assert "GONE1" not in store
    assert "GONE1" not in store.news
    assert "GONE1" not in store.locks
    assert "KEEP1" in store
    with pytest.raises(LobbyNotFound):
        store.get("GONE1")


def test_delete_unknown_lobby_is_noop(store):
    store.delete("NOPE0")
    assert store.lobbies == {}
