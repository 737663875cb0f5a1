"""Error taxonomy for the chat and transfer pipeline.

Every error the HTTP layer renders derives from ``AppError`` and carries its
own status code. ``ClassificationError`` and ``ResolutionError`` never reach
the HTTP layer: the classifier and the name resolver catch them and continue
on a degraded path.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.details}


class InvalidRequestError(AppError):
    """Missing or malformed request fields (user-correctable)."""

    status_code = 400
    code = "INVALID_REQUEST"


class ConfigurationError(AppError):
    """A required secret or endpoint is not configured."""

    status_code = 500
    code = "CONFIGURATION_ERROR"


class StorageError(AppError):
    status_code = 500
    code = "STORAGE_ERROR"


class ServiceError(AppError):
    """The language-model service call failed (timeout, auth, rate limit)."""

    status_code = 500
    code = "SERVICE_ERROR"


class ClassificationError(AppError):
    status_code = 500
    code = "CLASSIFICATION_ERROR"


class ResolutionError(AppError):
    status_code = 502
    code = "RESOLUTION_ERROR"


class ProposalError(AppError):
    """Estimation, nonce, signing or submission of a multisig proposal failed."""

    status_code = 502
    code = "PROPOSAL_ERROR"


class UpstreamError(AppError):
    """The multisig coordination service failed a read-only lookup."""

    status_code = 502
    code = "UPSTREAM_ERROR"
