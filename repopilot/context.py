"""Assembly of the shared repository context sent to every agent."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from repopilot.errors import FileReadError, RepopilotError

logger = logging.getLogger(__name__)


class FileFetcher(Protocol):
    async def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> str: ...


def format_file_block(path: str, content: str) -> str:
    return f"FILE: {path}\n{content}"


async def assemble_context(
    fetcher: FileFetcher,
    owner: str,
    repo: str,
    ref: str,
    paths: Sequence[str],
) -> str:
    """Fetch *paths* one after another and join them into one context string.

    Any unreadable file fails the whole assembly with :class:`FileReadError`.
    """
    blocks: list[str] = []
    for path in paths:
        try:
            content = await fetcher.get_file_content(owner, repo, path, ref)
        except FileReadError:
            raise
        except RepopilotError as e:
            raise FileReadError(path, status_code=e.status_code) from e
        if not isinstance(content, str):
            raise FileReadError(path)
        blocks.append(format_file_block(path, content))

    logger.info("Assembled context from %d file(s), %d chars", len(blocks), sum(map(len, blocks)))
    return "\n\n".join(blocks)
