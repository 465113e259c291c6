import json

import httpx
import pytest

from core.exceptions import EstimatorUnavailable, MalformedEstimatorOutput
from models import Scarcity
from services.estimator import (
    DemandContext,
    DemandResult,
    EstimatedReview,
    LLMEstimator,
    parse_demand_response,
    parse_news_response,
    strip_code_fences,
)
from services.llm_client import LLMClient
from services.marketing_data import MarketingStats, load_marketing_stats

DEMAND_PAYLOAD = {
    "absoluteDemand": 22543,
    "satisfactionDelta": -3,
    "sustainabilityScore": 48,
    "summary": "Gen Z loved the drops, Boomers tuned out.",
    "reviews": [
        {"sentiment": 0.9, "text": "Need it"},
        {"sentiment": "very negative", "text": "Ads everywhere"},
        "not a review",
    ],
}


def make_context():
    return DemandContext(
        company_name="Acme",
        product_name="Glow Socks",
        product_description="Socks that glow",
        price_per_unit=20,
        units_available=100,
        units_sold_last_round=0,
        scarcity=Scarcity.OVERSUPPLIED,
        sustainability_claim="none",
        region_cost_level="average",
        marketing_pressure=2.55,
        marketing_strategy={"budget": 1000, "channel": "TikTok"},
    )


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('  [1, 2]  ') == '[1, 2]'


def test_parse_demand_response_in_code_fence():
    result = parse_demand_response(f"```json\n{json.dumps(DEMAND_PAYLOAD)}\n```")

    assert result.absolute_demand == 22543
    assert result.satisfaction_delta == -3
    assert result.sustainability_score == 48
    assert result.summary.startswith("Gen Z")
    assert [(r.sentiment, r.text) for r in result.reviews] == [
        (0.9, "Need it"),
        (0, "Ads everywhere"),
    ]


def test_parse_demand_response_keeps_untrusted_demand_raw():
    payload = dict(DEMAND_PAYLOAD, absoluteDemand="plenty", sustainabilityScore=None)
    result = parse_demand_response(json.dumps(payload))
    assert result.absolute_demand == "plenty"
    assert result.sustainability_score is None


@pytest.mark.parametrize(
    "raw",
    [
        "The market loved it!",
        "[1, 2, 3]",
        json.dumps({"summary": "no demand field"}),
        json.dumps(dict(DEMAND_PAYLOAD, summary={"nested": True})),
    ],
)
def test_parse_demand_response_rejects_malformed(raw):
    with pytest.raises(MalformedEstimatorOutput):
        parse_demand_response(raw)


def test_parse_news_response():
    raw = "```json\n" + json.dumps([
        {"title": "Winners", "text": "...", "type": "top"},
        {"title": "Losers", "text": "...", "type": "flop"},
        {"title": "Inside", "text": "...", "type": "investigation"},
        {"title": "Mood", "text": "..."},
    ]) + "\n```"

    articles = parse_news_response(raw)

    assert [a.type for a in articles] == ["top", "flop", "investigation", "news"]


def test_parse_news_response_accepts_unexpected_count():
    articles = parse_news_response(json.dumps([{"title": "Only one", "text": "..."}]))
    assert len(articles) == 1


@pytest.mark.parametrize("raw", ['{"title": "x"}', "not json", '[{"text": "no title"}]'])
def test_parse_news_response_rejects_malformed(raw):
    with pytest.raises(MalformedEstimatorOutput):
        parse_news_response(raw)


def chat_completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


async def make_client(handler, api_key="sk-test"):
    client = LLMClient(model_name="gpt-4o-mini", api_key=api_key, base_url="https://llm.test/v1")
    await client.aclose()
    client.http_client = httpx.AsyncClient(
        base_url=client.base_url, transport=httpx.MockTransport(handler)
    )
    return client


@pytest.mark.asyncio
async def test_llm_estimator_round_trip():
    seen = {}

    def handler(request: httpx.Request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=chat_completion(json.dumps(DEMAND_PAYLOAD)))

    async with await make_client(handler) as client:
        estimator = LLMEstimator(client, MarketingStats())
        result = await estimator.estimate_demand(make_context())

    assert result.absolute_demand == 22543
    assert seen["path"] == "/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    prompt = seen["body"]["messages"][0]["content"]
    assert "Glow Socks" in prompt
    assert "Marketing pressure intensity (log-scaled): 2.55" in prompt
    assert "'channel': 'TikTok'" in prompt


@pytest.mark.asyncio
async def test_llm_client_http_error_is_unavailable():
    async with await make_client(lambda request: httpx.Response(503, text="busy")) as client:
        with pytest.raises(EstimatorUnavailable):
            await client.complete("hello")


@pytest.mark.asyncio
async def test_llm_client_without_choices_is_malformed():
    async with await make_client(lambda request: httpx.Response(200, json={"error": "?"})) as client:
        with pytest.raises(MalformedEstimatorOutput):
            await client.complete("hello")


@pytest.mark.asyncio
async def test_llm_client_without_api_key_is_unavailable():
    async with await make_client(lambda request: httpx.Response(200), api_key=None) as client:
        with pytest.raises(EstimatorUnavailable):
            await client.complete("hello")


def test_load_marketing_stats(tmp_path):
    path = tmp_path / "marketing_stats.csv"
    path.write_text("Question,GenZ,GenY\nBuying impulsively,34%,33%\n,,\n", encoding="utf-8")

    stats = load_marketing_stats(str(path))

    assert stats.rows == [{"Question": "Buying impulsively", "GenZ": "34%", "GenY": "33%"}]
    assert stats.format_for_prompt() == "Question;GenZ;GenY\nBuying impulsively;34%;33%"


def test_missing_marketing_stats_falls_back_to_defaults(tmp_path):
    stats = load_marketing_stats(str(tmp_path / "missing.csv"))
    assert stats.rows == []
    assert stats.format_for_prompt() == "No additional marketing statistics available."


def test_demand_result_keeps_review_models():
    result = DemandResult(
        absolute_demand=5,
        reviews=[EstimatedReview(sentiment=1, text="a"), {"sentiment": -1, "text": "b"}, 3],
    )
    assert [r.text for r in result.reviews] == ["a", "b"]
