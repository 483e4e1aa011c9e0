"""Error taxonomy shared by the workflow, the HTTP server and the CLI."""

from __future__ import annotations


class RepopilotError(Exception):
    """Base class for every error surfaced to a caller.

    ``status_code`` is the HTTP status the server should answer with. When
    the failure came from an upstream service that reported its own status,
    that status is carried instead of the default.
    """

    default_status: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.default_status


class MissingCredential(RepopilotError):
    """No GitHub token or completion API key was supplied."""

    default_status = 401


class InvalidRequest(RepopilotError):
    """A required field is missing or has the wrong type."""

    default_status = 400


class FileReadError(RepopilotError):
    """A selected repository file could not be read as text."""

    def __init__(self, path: str, status_code: int | None = None) -> None:
        super().__init__(f"Unable to read file: {path}", status_code)
        self.path = path


class GitHubError(RepopilotError):
    """A repository listing call failed."""


class AdapterError(RepopilotError):
    """The completion provider failed or returned nothing usable."""


class EmptyResponse(AdapterError):
    """The completion provider returned an empty reply."""


class MalformedJson(AdapterError):
    """The completion provider reply is not a single JSON object."""
