"""
新聞服務：維護每個 Lobby 的新聞時間軸

兩個來源：
1. Host 宣告且 in_news 的 Launch Event（原樣鏡像，round = effect_round）
2. 回合結束時 Estimator 生成的文章

時間軸只會新增、依 id 去重；重複同步不會產生重複文章。
"""
import logging
import uuid
from typing import List

from models import Lobby, NewsArticle
from core.lobby_store import LobbyStore
from services.estimator import (
    Estimator,
    GeneratedArticle,
    PlayerRoundSummary,
    RoundNewsContext,
)

logger = logging.getLogger(__name__)

EVENT_CATEGORY = "event"


def _append_unique(feed: List[NewsArticle], articles: List[NewsArticle]) -> int:
    existing_ids = {article.id for article in feed}
    added = 0
    for article in articles:
        if article.id in existing_ids:
            continue
        feed.append(article)
        existing_ids.add(article.id)
        added += 1
    return added


def sync_launch_events(store: LobbyStore, lobby: Lobby) -> int:
    """
    把 in_news 的 Launch Event 鏡像到新聞時間軸

    返回：
        新增的文章數量（已存在的 id 不計）
    """
    articles = [
        NewsArticle(
            id=event.id,
            title=event.title,
            text=event.text,
            round=event.effect_round,
            category=EVENT_CATEGORY,
        )
        for event in lobby.launch_events
        if event.in_news
    ]
    added = _append_unique(store.news_for(lobby.code), articles)
    if added:
        logger.info(f"Synced {added} launch events into news for lobby {lobby.code}")
    return added


def make_article_id(round_number: int, index: int) -> str:
    """
    生成文章 id：round-{回合}-{序號}-{nonce}

    nonce 讓同一回合重複生成也不會撞 id
    """
    return f"round-{round_number}-{index}-{uuid.uuid4().hex[:8]}"


def append_generated_articles(
    store: LobbyStore,
    lobby: Lobby,
    round_number: int,
    generated: List[GeneratedArticle],
) -> List[NewsArticle]:
    articles = [
        NewsArticle(
            id=make_article_id(round_number, index),
            title=article.title,
            text=article.text,
            round=round_number,
            category=article.type,
        )
        for index, article in enumerate(generated)
    ]
    _append_unique(store.news_for(lobby.code), articles)
    return articles


def build_round_news_context(lobby: Lobby) -> RoundNewsContext:
    summaries = [
        PlayerRoundSummary(name=p.name, units_sold=p.units_sold, profit=p.profit)
        for p in lobby.players
    ]
    by_units = sorted(summaries, key=lambda s: s.units_sold, reverse=True)
    return RoundNewsContext(
        round=lobby.current_round,
        players=summaries,
        top_seller=by_units[0],
        lowest_seller=by_units[-1],
    )


async def generate_round_news(store: LobbyStore, lobby: Lobby, estimator: Estimator) -> None:
    """
    回合結束後生成新聞（每個 Lobby 每回合一次）

    失敗只記 log，不影響回合結算結果
    """
    if not lobby.players:
        return

    round_number = lobby.current_round
    try:
        generated = await estimator.generate_news(build_round_news_context(lobby))
        articles = append_generated_articles(store, lobby, round_number, generated)
        logger.info(
            f"AI news generated for lobby {lobby.code}, round {round_number}: "
            f"{len(articles)} articles"
        )
    except Exception as e:
        logger.error(f"AI news generation failed for lobby {lobby.code}: {e}", exc_info=True)
