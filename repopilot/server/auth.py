"""Credential resolution for incoming requests.

Credentials are read, never stored: the GitHub token comes from a bearer
``Authorization`` header or the ``github_token`` cookie, the completion key
from the ``X-OpenAI-Key`` header or the ``openai_api_key`` cookie. When the
server allows it, the process environment is the last fallback.
"""

from __future__ import annotations

import os

from fastapi import Request

from repopilot.config import ServerConfig
from repopilot.errors import MissingCredential

GITHUB_COOKIE = "github_token"
OPENAI_COOKIE = "openai_api_key"
OPENAI_HEADER = "x-openai-key"


def get_github_token(request: Request, config: ServerConfig) -> str | None:
    auth_header = request.headers.get("authorization", "")
    if auth_header.lower().startswith("bearer "):
        token = auth_header[len("bearer ") :].strip()
        if token:
            return token

    token = request.cookies.get(GITHUB_COOKIE)
    if token:
        return token

    if config.allow_env_credentials:
        return os.environ.get("GITHUB_TOKEN") or None
    return None


def get_openai_api_key(request: Request, config: ServerConfig) -> str | None:
    key = request.headers.get(OPENAI_HEADER, "").strip()
    if key:
        return key

    key = request.cookies.get(OPENAI_COOKIE)
    if key:
        return key

    if config.allow_env_credentials:
        return os.environ.get("OPENAI_API_KEY") or None
    return None


def require_github_token(request: Request, config: ServerConfig) -> str:
    token = get_github_token(request, config)
    if not token:
        raise MissingCredential("Missing GitHub token")
    return token


def require_openai_api_key(request: Request, config: ServerConfig) -> str:
    key = get_openai_api_key(request, config)
    if not key:
        raise MissingCredential("Missing OpenAI API key")
    return key
