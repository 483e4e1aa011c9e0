"""Minimal async GitHub REST client for reading repository content."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any
from urllib.parse import quote

import httpx

from repopilot.errors import FileReadError, GitHubError

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"


class GitHubClient:
    """Thin wrapper over the GitHub contents and repos endpoints.

    Usage:
        async with GitHubClient(token) as gh:
            text = await gh.get_file_content("octo", "demo", "src/index.ts", "main")
    """

    def __init__(
        self,
        token: str,
        api_base: str = GITHUB_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=api_base.rstrip("/"),
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_contents(
        self, owner: str, repo: str, path: str, ref: str | None
    ) -> httpx.Response:
        url = f"/repos/{quote(owner)}/{quote(repo)}/contents/{quote(path.strip('/'))}"
        params = {"ref": ref} if ref else None
        return await self._client.get(url, params=params)

    async def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> str:
        """Return the UTF-8 text of a single file at *ref*.

        Raises:
            FileReadError: if the path is missing, is not a plain file, or
                its bytes are not UTF-8 text.
        """
        try:
            resp = await self._get_contents(owner, repo, path, ref)
        except httpx.HTTPError as e:
            logger.error("Fetching %s failed: %s", path, e)
            raise FileReadError(path) from e

        if resp.status_code >= 400:
            logger.error("Fetching %s returned HTTP %d", path, resp.status_code)
            raise FileReadError(path, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            logger.error("Fetching %s returned a non-JSON body", path)
            raise FileReadError(path) from e

        if not isinstance(data, dict) or not isinstance(data.get("content"), str):
            raise FileReadError(path)
        if data.get("encoding", "base64") != "base64":
            raise FileReadError(path)

        try:
            raw = base64.b64decode(data["content"])
            return raw.decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise FileReadError(path) from e

    async def list_files(
        self, owner: str, repo: str, path: str = "", ref: str | None = None
    ) -> list[dict[str, Any]]:
        """List the entries of a directory. A file path yields an empty list."""
        try:
            resp = await self._get_contents(owner, repo, path, ref)
        except httpx.HTTPError as e:
            raise GitHubError(f"Failed to list files: {e}") from e
        _raise_for_status(resp, "Failed to list files")

        data = _json_body(resp, "Failed to list files")
        if not isinstance(data, list):
            return []
        return [
            {
                "type": entry.get("type"),
                "name": entry.get("name"),
                "path": entry.get("path"),
                "size": entry.get("size"),
            }
            for entry in data
            if isinstance(entry, dict)
        ]

    async def list_repos(self, per_page: int = 100) -> list[dict[str, Any]]:
        """List repositories visible to the authenticated user."""
        try:
            resp = await self._client.get("/user/repos", params={"per_page": per_page})
        except httpx.HTTPError as e:
            raise GitHubError(f"Failed to list repositories: {e}") from e
        _raise_for_status(resp, "Failed to list repositories")

        data = _json_body(resp, "Failed to list repositories")
        if not isinstance(data, list):
            raise GitHubError("Failed to list repositories: unexpected response")
        return [
            {
                "name": r.get("name"),
                "fullName": r.get("full_name"),
                "private": bool(r.get("private")),
                "defaultBranch": r.get("default_branch"),
            }
            for r in data
            if isinstance(r, dict)
        ]


def _raise_for_status(resp: httpx.Response, message: str) -> None:
    if resp.status_code < 400:
        return
    detail = ""
    try:
        body = resp.json()
        if isinstance(body, dict):
            detail = str(body.get("message", ""))
    except ValueError:
        pass
    text = f"{message}: {detail}" if detail else message
    raise GitHubError(text, status_code=resp.status_code)


def _json_body(resp: httpx.Response, message: str) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise GitHubError(f"{message}: response is not JSON") from e
