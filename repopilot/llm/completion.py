"""Completion client boundary used by the agent workflow."""

from __future__ import annotations

import logging
from typing import Protocol

from repopilot.errors import AdapterError

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Anything that can turn system instructions and a user message into text.

    Implementations must constrain the reply to a single JSON object and
    raise :class:`AdapterError` on any transport or provider failure.
    """

    async def complete(self, system: str, user: str) -> str: ...


class LiteLLMCompletionClient:
    """Completion client backed by LangChain + LiteLLM in JSON mode."""

    def __init__(
        self,
        model_name: str = "gpt-4o-mini",
        api_key: str | None = None,
        temperature: float = 0.2,
    ) -> None:
        self.model_name = model_name
        self.temperature = temperature
        self._api_key = api_key

    async def complete(self, system: str, user: str) -> str:
        from langchain_core.messages import HumanMessage, SystemMessage

        from repopilot.llm.factory import get_llm

        llm = get_llm(
            self.model_name,
            temperature=self.temperature,
            api_key=self._api_key,
            json_mode=True,
        )
        try:
            response = await llm.ainvoke(
                [SystemMessage(content=system), HumanMessage(content=user)]
            )
        except AdapterError:
            raise
        except Exception as e:
            status = getattr(e, "status_code", None)
            logger.error("Completion request to %s failed: %s", self.model_name, e)
            raise AdapterError(
                str(e) or type(e).__name__,
                status_code=status if isinstance(status, int) else None,
            ) from e

        content = response.content
        if isinstance(content, list):
            # Some providers return content blocks instead of a plain string
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in content
            )
        return str(content or "")
