"""LLM API client wrapper with provider abstraction."""

from typing import Union

import structlog
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from .interfaces import AnalysisRequest, AnalysisResult, AnalystConfig, AnalyzerInterface
from ..config.settings import settings
from ..errors import AnalysisConfigError, AnalysisError
from ..ingestion.interfaces import Content

logger = structlog.get_logger()


class AnalysisClient(AnalyzerInterface):
    """Completion client supporting OpenAI and Anthropic."""

    def __init__(self, provider: str = None, api_key: str = None, client=None):
        self.provider = provider or settings.llm_provider
        self._api_key = api_key
        self._client = client

    def _get_client(self):
        """Lazy initialization of the client."""
        if self._client is not None:
            return self._client

        if self.provider == "openai":
            import openai
            api_key = self._api_key or settings.openai_api_key
            if not api_key:
                raise AnalysisConfigError("OpenAI API key not configured. Set RM_OPENAI_API_KEY.")
            self._client = openai.AsyncOpenAI(api_key=api_key)

        elif self.provider == "anthropic":
            import anthropic
            api_key = self._api_key or settings.anthropic_api_key
            if not api_key:
                raise AnalysisConfigError("Anthropic API key not configured. Set RM_ANTHROPIC_API_KEY.")
            self._client = anthropic.AsyncAnthropic(api_key=api_key)

        else:
            raise AnalysisConfigError(f"Unknown LLM provider: {self.provider}")

        return self._client

    @retry(
        retry=retry_if_not_exception_type(AnalysisConfigError),
        stop=stop_after_attempt(settings.llm_max_retries),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run one completion and report its token usage."""
        client = self._get_client()
        model = request.model or settings.llm_model
        max_tokens = request.max_tokens or settings.llm_max_tokens
        temperature = request.temperature if request.temperature is not None else settings.llm_temperature

        try:
            if self.provider == "anthropic":
                result = await self._complete_anthropic(client, request, model, max_tokens, temperature)
            else:
                result = await self._complete_openai(client, request, model, max_tokens, temperature)
        except AnalysisError:
            raise
        except Exception as e:
            logger.error("llm_call_failed", provider=self.provider, model=model, error=str(e))
            raise AnalysisError(f"{self.provider} API error: {e}") from e

        logger.info("analysis_completed", provider=self.provider, model=model, tokens=result.tokens_used)
        return result

    async def _complete_openai(self, client, request: AnalysisRequest, model: str, max_tokens: int, temperature: float) -> AnalysisResult:
        """Call OpenAI API."""
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.user_content})

        response = await client.chat.completions.create(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=messages
        )
        if not response.choices:
            raise AnalysisError("OpenAI returned no choices")

        usage = getattr(response, "usage", None)
        return AnalysisResult(
            text=response.choices[0].message.content or "",
            tokens_used=getattr(usage, "total_tokens", 0) or 0,
        )

    async def _complete_anthropic(self, client, request: AnalysisRequest, model: str, max_tokens: int, temperature: float) -> AnalysisResult:
        """Call Anthropic API."""
        kwargs = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": request.user_content}],
        }
        if request.system_prompt:
            kwargs["system"] = request.system_prompt

        response = await client.messages.create(**kwargs)
        if not response.content:
            raise AnalysisError("Anthropic returned an empty response")

        usage = getattr(response, "usage", None)
        tokens = (getattr(usage, "input_tokens", 0) or 0) + (getattr(usage, "output_tokens", 0) or 0)
        return AnalysisResult(text=response.content[0].text, tokens_used=tokens)


async def analyze_content(
    content: Content,
    analyst: Union[AnalystConfig, dict],
    analyzer: AnalyzerInterface = None
) -> AnalysisResult:
    """Run an analyst over one content item.

    Args:
        content: Content item to analyze
        analyst: AnalystConfig, or a stored analyst dict
        analyzer: Analysis backend (default AnalysisClient from settings)

    Returns:
        AnalysisResult with the text and tokens to store
    """
    if isinstance(analyst, dict):
        analyst = AnalystConfig.from_dict(analyst)
    analyzer = analyzer or AnalysisClient()

    result = await analyzer.analyze(analyst.build_request(content))
    logger.info(
        "content_analyzed",
        content_id=content.id,
        analyst=analyst.name,
        tokens=result.tokens_used
    )
    return result
