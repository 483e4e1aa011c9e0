"""LLM factory: returns a LangChain BaseChatModel backed by LiteLLM."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from langchain_core.language_models import BaseChatModel

JSON_OBJECT_FORMAT = {"type": "json_object"}


def get_llm(
    model_name: str = "gpt-4o-mini",
    temperature: float = 0.0,
    api_key: str | None = None,
    json_mode: bool = False,
) -> BaseChatModel:
    """Return a LangChain chat model via LiteLLM.

    Supports any model string that LiteLLM understands:
      - "gpt-4o" / "gpt-4o-mini"
      - "claude-sonnet-4-6"
      - "gemini/gemini-2.0-flash"
      - etc.

    Models built without a per-request ``api_key`` are cached and read their
    credentials from the environment. Keyed models are never cached.
    """
    if api_key is None:
        return _cached_llm(model_name, temperature, json_mode)
    return _build_llm(model_name, temperature, api_key, json_mode)


@lru_cache(maxsize=32)
def _cached_llm(model_name: str, temperature: float, json_mode: bool) -> BaseChatModel:
    return _build_llm(model_name, temperature, None, json_mode)


def _build_llm(
    model_name: str,
    temperature: float,
    api_key: str | None,
    json_mode: bool,
) -> BaseChatModel:
    from langchain_litellm import ChatLiteLLM  # type: ignore[import-untyped]

    model_kwargs: dict[str, Any] = {}
    if json_mode:
        model_kwargs["response_format"] = dict(JSON_OBJECT_FORMAT)
    if api_key:
        model_kwargs["api_key"] = api_key

    return ChatLiteLLM(  # type: ignore[return-value]
        model=model_name,
        temperature=temperature,
        model_kwargs=model_kwargs,
    )
