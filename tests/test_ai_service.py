import asyncio
import json

import httpx

from govwatch.config import AIConfig
from govwatch.services.ai_service import AIResult, AIService


def _config(**overrides) -> AIConfig:
    values = {"enable": True, "api_key": "test-key", "gateway_url": "https://gateway.test/v1/chat"}
    values.update(overrides)
    return AIConfig(**values)


def _service(handler, **overrides) -> AIService:
    return AIService(
        config=_config(**overrides),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def _completion(content: str, tokens: int = 42) -> httpx.Response:
    return httpx.Response(
        200,
        json={"choices": [{"message": {"content": content}}], "usage": {"total_tokens": tokens}},
    )


def test_disabled_service_makes_no_calls() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return _completion("never")

    async def scenario():
        flag_off = _service(handler, enable=False)
        no_key = _service(handler, api_key=None)
        return (
            await flag_off.summarize("Some ordinance text"),
            await no_key.classify_tags("Some ordinance text"),
        )

    summary, tags = asyncio.run(scenario())

    assert summary == AIResult()
    assert tags == AIResult()
    assert calls == []


def test_summary_sends_truncated_text_and_counts_tokens() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return _completion("  Council adopted the budget.  ", tokens=120)

    async def scenario():
        service = _service(handler, summary_input_chars=10)
        try:
            return await service.summarize("A" * 50)
        finally:
            await service.close()

    result = asyncio.run(scenario())

    assert result.content == "Council adopted the budget."
    assert result.tokens_used == 120
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["messages"][1]["content"] == "A" * 10
    assert seen["body"]["max_tokens"] == 300


def test_tags_keep_only_known_topics() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return _completion("Zoning, housing, Aliens, budget., housing")

    async def scenario():
        service = _service(handler)
        try:
            return await service.classify_tags("Rezoning for affordable housing")
        finally:
            await service.close()

    result = asyncio.run(scenario())

    assert result.tags() == ["zoning", "housing", "budget"]


def test_gateway_failures_degrade_to_empty_result() -> None:
    responses = [
        httpx.Response(500, text="upstream exploded"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"choices": []}),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        service = _service(handler)
        unreachable = _service(broken)
        results = [await service.summarize("text") for _ in range(3)]
        results.append(await unreachable.summarize("text"))
        return results

    results = asyncio.run(scenario())

    assert results == [AIResult()] * 4
