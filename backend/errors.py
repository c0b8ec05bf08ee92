"""Content agent error types mapped to HTTP status codes by the router."""
from __future__ import annotations


class AgentError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(AgentError):
    """Missing required context field or unknown action."""

    status_code = 400


class NotFoundError(AgentError):
    status_code = 404


class GenerationError(AgentError):
    """The AI gateway rejected or failed a completion request."""

    status_code = 502
