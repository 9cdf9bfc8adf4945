"""Unit tests for the analysis client."""

import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from readmaster.analysis.client import AnalysisClient, analyze_content
from readmaster.analysis.interfaces import AnalysisRequest, AnalysisResult, AnalystConfig, build_user_content
from readmaster.config.settings import settings
from readmaster.errors import AnalysisConfigError, AnalysisError
from readmaster.ingestion.interfaces import Content


@pytest.fixture
def request_():
    return AnalysisRequest(
        system_prompt="You are a concise technical editor.",
        user_content="Title: Python 3.13\n\nContent: Free-threaded builds.",
        model="gpt-4o-mini",
        temperature=0.2,
        max_tokens=300,
    )


def openai_client(text="Three key takeaways", total_tokens=42):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(total_tokens=total_tokens),
    ))
    return client


def test_build_user_content():
    content = Content(source_id=1, title="Python 3.13", raw_content="raw", processed_content="processed")
    assert build_user_content(content) == "Title: Python 3.13\n\nContent: processed"

    content.processed_content = ""
    assert build_user_content(content) == "Title: Python 3.13\n\nContent: raw"


@pytest.mark.asyncio
class TestAnalysisClient:
    """Tests for AnalysisClient with mocked providers."""

    async def test_openai_completion(self, request_):
        client = openai_client()
        result = await AnalysisClient(provider="openai", client=client).analyze(request_)

        assert result.text == "Three key takeaways"
        assert result.tokens_used == 42

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 300
        assert kwargs["messages"][0] == {"role": "system", "content": request_.system_prompt}
        assert kwargs["messages"][1]["role"] == "user"

    async def test_anthropic_completion(self, request_):
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[SimpleNamespace(text="Summary")],
            usage=SimpleNamespace(input_tokens=30, output_tokens=12),
        ))

        result = await AnalysisClient(provider="anthropic", client=client).analyze(request_)

        assert result.text == "Summary"
        assert result.tokens_used == 42
        assert client.messages.create.call_args.kwargs["system"] == request_.system_prompt

    async def test_defaults_from_settings(self):
        client = openai_client()
        request = AnalysisRequest(system_prompt="", user_content="hi")
        await AnalysisClient(provider="openai", client=client).analyze(request)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == settings.llm_model
        assert kwargs["max_tokens"] == settings.llm_max_tokens
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]

    async def test_missing_api_key(self, request_, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", None)
        with pytest.raises(AnalysisConfigError):
            await AnalysisClient(provider="openai").analyze(request_)

    async def test_unknown_provider(self, request_):
        with pytest.raises(AnalysisConfigError):
            await AnalysisClient(provider="carrier-pigeon").analyze(request_)

    async def test_provider_failure_is_typed_and_retried(self, request_):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("502 Bad Gateway"))

        with pytest.raises(AnalysisError) as exc_info:
            await AnalysisClient(provider="openai", client=client).analyze(request_)

        assert "502" in str(exc_info.value)
        assert client.chat.completions.create.await_count == settings.llm_max_retries


@pytest.mark.asyncio
class TestAnalyzeContent:
    """Tests for running an analyst over a content item."""

    async def test_request_built_from_analyst_and_content(self):
        analyzer = MagicMock()
        analyzer.analyze = AsyncMock(return_value=AnalysisResult(text="Key points", tokens_used=57))
        analyst = AnalystConfig(
            name="Editor",
            system_prompt="Summarize for engineers.",
            model="gpt-4o",
            temperature=0.3,
            max_tokens=500,
        )
        content = Content(id=9, source_id=1, title="Python 3.13", processed_content="Free-threaded builds.")

        result = await analyze_content(content, analyst, analyzer=analyzer)

        assert (result.text, result.tokens_used) == ("Key points", 57)
        request = analyzer.analyze.call_args.args[0]
        assert request.system_prompt == "Summarize for engineers."
        assert request.user_content == "Title: Python 3.13\n\nContent: Free-threaded builds."
        assert (request.model, request.temperature, request.max_tokens) == ("gpt-4o", 0.3, 500)

    async def test_stored_analyst_dict(self):
        client = openai_client(text="Done", total_tokens=12)
        analyst = {
            "name": "Reviewer",
            "category": "domain_expert",
            "system_prompt": "Review this.",
            "model": "gpt-4o-mini",
            "temperature": 0.5,
            "max_tokens": 200,
            "rating": 4.5,
        }
        content = Content(source_id=1, title="Post", raw_content="raw body")

        result = await analyze_content(content, analyst, analyzer=AnalysisClient(provider="openai", client=client))

        assert result.tokens_used == 12
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 200
        assert kwargs["messages"][1]["content"] == "Title: Post\n\nContent: raw body"
