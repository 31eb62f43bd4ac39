"""
Vendor-hosted tools.

A hosted tool runs on the vendor's side (web search, file search, code
execution) while the model works on its answer. Configs are typed per vendor:
each one names the ``provider`` that serves it and a ``kind`` matched against
``ProviderModel.tools``, and serializes itself with ``blocks`` into the
entries of that vendor's ``tools`` array. ``headers`` lists extra request
headers the tool needs (Anthropic beta flags).

Configs are immutable; sequence fields are normalized to tuples.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Literal, Optional, Sequence, Tuple

from .provider import Provider

TOOL_WEB_SEARCH = "web_search"
TOOL_FILE_SEARCH = "file_search"
TOOL_CODE_EXECUTION = "code_execution"
TOOL_X_SEARCH = "x_search"

SearchContextSize = Literal["low", "medium", "high"]
CacheTTL = Literal["5m", "1h"]


def _compact(**fields: Any) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def _listed(values: Sequence[str]) -> Optional[List[str]]:
    return list(values) if values else None


def _freeze(tool: Any, *names: str) -> None:
    for name in names:
        object.__setattr__(tool, name, tuple(getattr(tool, name)))


def _exclusive(tool: Any, first: str, second: str) -> None:
    if getattr(tool, first) and getattr(tool, second):
        raise ValueError(f"{type(tool).__name__}: {first} and {second} cannot be combined")


def _cache_control(ttl: Optional[CacheTTL]) -> Optional[Dict[str, str]]:
    return {"type": "ephemeral", "ttl": ttl} if ttl else None


@dataclass(frozen=True)
class HostedTool:
    """Base for vendor-hosted tool configs."""

    provider: ClassVar[Provider]
    kind: ClassVar[str]

    def blocks(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def headers(self) -> Dict[str, str]:
        return {}


# OpenAI (Responses API) -------------------------------------------------------
@dataclass(frozen=True)
class OpenAIWebSearch(HostedTool):
    provider: ClassVar[Provider] = Provider.OPENAI
    kind: ClassVar[str] = TOOL_WEB_SEARCH

    search_context_size: Optional[SearchContextSize] = None
    tool_type: str = "web_search_preview"

    def blocks(self) -> List[Dict[str, Any]]:
        return [_compact(type=self.tool_type, search_context_size=self.search_context_size)]


@dataclass(frozen=True)
class OpenAIFileSearch(HostedTool):
    """Search over uploaded vector stores (at least one id is required)."""

    provider: ClassVar[Provider] = Provider.OPENAI
    kind: ClassVar[str] = TOOL_FILE_SEARCH

    vector_store_ids: Tuple[str, ...] = ()
    max_num_results: Optional[int] = None

    def __post_init__(self) -> None:
        _freeze(self, "vector_store_ids")
        if not self.vector_store_ids:
            raise ValueError("OpenAIFileSearch needs at least one vector store id")

    def blocks(self) -> List[Dict[str, Any]]:
        return [
            _compact(
                type="file_search",
                vector_store_ids=list(self.vector_store_ids),
                max_num_results=self.max_num_results,
            )
        ]


@dataclass(frozen=True)
class OpenAICodeInterpreter(HostedTool):
    """Code interpreter in an existing container or an automatic one."""

    provider: ClassVar[Provider] = Provider.OPENAI
    kind: ClassVar[str] = TOOL_CODE_EXECUTION

    container_id: Optional[str] = None
    file_ids: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "file_ids")
        _exclusive(self, "container_id", "file_ids")

    def blocks(self) -> List[Dict[str, Any]]:
        container: Any = self.container_id or {"type": "auto", "file_ids": list(self.file_ids)}
        return [{"type": "code_interpreter", "container": container}]


# Anthropic --------------------------------------------------------------------
@dataclass(frozen=True)
class AnthropicUserLocation:
    """Approximate location used to localize web search results."""

    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            type="approximate",
            city=self.city,
            region=self.region,
            country=self.country,
            timezone=self.timezone,
        )


@dataclass(frozen=True)
class AnthropicWebSearch(HostedTool):
    """Server-side web search; allowed and blocked domains are exclusive."""

    provider: ClassVar[Provider] = Provider.ANTHROPIC
    kind: ClassVar[str] = TOOL_WEB_SEARCH

    allowed_domains: Tuple[str, ...] = ()
    blocked_domains: Tuple[str, ...] = ()
    max_uses: Optional[int] = None
    user_location: Optional[AnthropicUserLocation] = None
    cache_ttl: Optional[CacheTTL] = None

    def __post_init__(self) -> None:
        _freeze(self, "allowed_domains", "blocked_domains")
        _exclusive(self, "allowed_domains", "blocked_domains")

    def blocks(self) -> List[Dict[str, Any]]:
        return [
            _compact(
                type="web_search_20250305",
                name="web_search",
                allowed_domains=_listed(self.allowed_domains),
                blocked_domains=_listed(self.blocked_domains),
                max_uses=self.max_uses,
                user_location=self.user_location.to_dict() if self.user_location else None,
                cache_control=_cache_control(self.cache_ttl),
            )
        ]


@dataclass(frozen=True)
class AnthropicCodeExecution(HostedTool):
    provider: ClassVar[Provider] = Provider.ANTHROPIC
    kind: ClassVar[str] = TOOL_CODE_EXECUTION

    cache_ttl: Optional[CacheTTL] = None

    def blocks(self) -> List[Dict[str, Any]]:
        return [
            _compact(
                type="code_execution_20250825",
                name="code_execution",
                cache_control=_cache_control(self.cache_ttl),
            )
        ]

    def headers(self) -> Dict[str, str]:
        return {"anthropic-beta": "code-execution-2025-08-25"}


# Google Gemini ----------------------------------------------------------------
@dataclass(frozen=True)
class GeminiWebSearch(HostedTool):
    """Google Search grounding, URL context, or both.

    Without ``context_urls`` the model searches the web. With URLs it reads
    them (the URLs are also listed in the prompt); ``include_web`` adds web
    search on top.
    """

    provider: ClassVar[Provider] = Provider.GOOGLE
    kind: ClassVar[str] = TOOL_WEB_SEARCH

    context_urls: Tuple[str, ...] = ()
    include_web: bool = False

    def __post_init__(self) -> None:
        _freeze(self, "context_urls")

    def blocks(self) -> List[Dict[str, Any]]:
        if not self.context_urls:
            return [{"google_search": {}}]
        if not self.include_web:
            return [{"url_context": {}}]
        return [{"url_context": {}}, {"google_search": {}}]


@dataclass(frozen=True)
class GeminiCodeExecution(HostedTool):
    provider: ClassVar[Provider] = Provider.GOOGLE
    kind: ClassVar[str] = TOOL_CODE_EXECUTION

    def blocks(self) -> List[Dict[str, Any]]:
        return [{"code_execution": {}}]


# xAI (Responses API) ----------------------------------------------------------
@dataclass(frozen=True)
class XAIWebSearch(HostedTool):
    """Web search; allowed and excluded domains are exclusive."""

    provider: ClassVar[Provider] = Provider.XAI
    kind: ClassVar[str] = TOOL_WEB_SEARCH

    allowed_domains: Tuple[str, ...] = ()
    excluded_domains: Tuple[str, ...] = ()
    enable_image_understanding: Optional[bool] = None

    def __post_init__(self) -> None:
        _freeze(self, "allowed_domains", "excluded_domains")
        _exclusive(self, "allowed_domains", "excluded_domains")

    def blocks(self) -> List[Dict[str, Any]]:
        filters = _compact(
            allowed_domains=_listed(self.allowed_domains),
            excluded_domains=_listed(self.excluded_domains),
        )
        return [
            _compact(
                type="web_search",
                filters=filters or None,
                enable_image_understanding=self.enable_image_understanding,
            )
        ]


@dataclass(frozen=True)
class XAIXSearch(HostedTool):
    """Search over X posts; dates are ISO ``YYYY-MM-DD`` strings."""

    provider: ClassVar[Provider] = Provider.XAI
    kind: ClassVar[str] = TOOL_X_SEARCH

    allowed_x_handles: Tuple[str, ...] = ()
    excluded_x_handles: Tuple[str, ...] = ()
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    enable_image_understanding: Optional[bool] = None
    enable_video_understanding: Optional[bool] = None

    def __post_init__(self) -> None:
        _freeze(self, "allowed_x_handles", "excluded_x_handles")
        _exclusive(self, "allowed_x_handles", "excluded_x_handles")

    def blocks(self) -> List[Dict[str, Any]]:
        return [
            _compact(
                type="x_search",
                allowed_x_handles=_listed(self.allowed_x_handles),
                excluded_x_handles=_listed(self.excluded_x_handles),
                from_date=self.from_date,
                to_date=self.to_date,
                enable_image_understanding=self.enable_image_understanding,
                enable_video_understanding=self.enable_video_understanding,
            )
        ]


# Mistral (Conversations API) --------------------------------------------------
@dataclass(frozen=True)
class MistralWebSearch(HostedTool):
    provider: ClassVar[Provider] = Provider.MISTRAL
    kind: ClassVar[str] = TOOL_WEB_SEARCH

    premium: bool = False

    def blocks(self) -> List[Dict[str, Any]]:
        return [{"type": "web_search_premium" if self.premium else "web_search"}]


def tool_blocks(tools: Sequence[HostedTool]) -> List[Dict[str, Any]]:
    """Concatenate the wire blocks of ``tools`` in order."""
    blocks: List[Dict[str, Any]] = []
    for tool in tools:
        blocks.extend(tool.blocks())
    return blocks


def tool_headers(tools: Sequence[HostedTool]) -> Dict[str, str]:
    """Merge tool headers; repeated names are joined with commas."""
    merged: Dict[str, List[str]] = {}
    for tool in tools:
        for name, value in tool.headers().items():
            values = merged.setdefault(name, [])
            if value not in values:
                values.append(value)
    return {name: ",".join(values) for name, values in merged.items()}


__all__ = [
    "TOOL_WEB_SEARCH",
    "TOOL_FILE_SEARCH",
    "TOOL_CODE_EXECUTION",
    "TOOL_X_SEARCH",
    "HostedTool",
    "OpenAIWebSearch",
    "OpenAIFileSearch",
    "OpenAICodeInterpreter",
    "AnthropicUserLocation",
    "AnthropicWebSearch",
    "AnthropicCodeExecution",
    "GeminiWebSearch",
    "GeminiCodeExecution",
    "XAIWebSearch",
    "XAIXSearch",
    "MistralWebSearch",
    "tool_blocks",
    "tool_headers",
]
