"""Construction of the configured LLM provider."""

from typing import Any

from .base import LLMProvider
from .providers import GeminiProvider

_PROVIDERS: dict[str, type[LLMProvider]] = {
    "gemini": GeminiProvider,
}


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Build the provider named by ``provider`` (case-insensitive).

    Args:
        provider: Provider name; only "gemini" is available
        **config: Keyword arguments for the provider class. Gemini needs
            ``api_key`` and accepts ``model`` and ``max_retries``.

    Raises:
        ValueError: Unknown provider name
        TypeError: ``api_key`` missing from ``config``

    Example:
        >>> llm = create_llm_provider("gemini", api_key=key, model="gemini-2.5-flash")
    """
    provider_cls = _PROVIDERS.get(provider.lower())
    if provider_cls is None:
        supported = ", ".join(sorted(_PROVIDERS))
        raise ValueError(f"Unsupported provider: {provider}. Supported providers: {supported}")

    if not config.get("api_key"):
        raise TypeError(f"{provider_cls.__name__} needs an 'api_key'")
    return provider_cls(**config)
