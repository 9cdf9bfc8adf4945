"""Interface definitions for content analysis."""

from dataclasses import dataclass

from ..ingestion.interfaces import Content


@dataclass
class AnalysisRequest:
    """One completion call made on behalf of an analyst."""
    system_prompt: str
    user_content: str
    model: str = None
    temperature: float = None
    max_tokens: int = None


@dataclass
class AnalysisResult:
    """Completion text and the tokens it cost."""
    text: str
    tokens_used: int = 0


@dataclass
class AnalystConfig:
    """A named analysis setup: system prompt plus model parameters."""
    name: str
    system_prompt: str
    model: str = None
    temperature: float = None
    max_tokens: int = None

    @classmethod
    def from_dict(cls, data: dict) -> "AnalystConfig":
        return cls(
            name=data.get("name", ""),
            system_prompt=data.get("system_prompt", ""),
            model=data.get("model"),
            temperature=data.get("temperature"),
            max_tokens=data.get("max_tokens"),
        )

    def build_request(self, content: Content) -> AnalysisRequest:
        return AnalysisRequest(
            system_prompt=self.system_prompt,
            user_content=build_user_content(content),
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )


def build_user_content(content: Content) -> str:
    """Render a content item as the user message of an analysis."""
    body = content.processed_content or content.raw_content or ""
    return f"Title: {content.title}\n\nContent: {body}"


class AnalyzerInterface:
    """Interface for the analysis collaborator."""

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run one analysis."""
        raise NotImplementedError
