"""
Centralized error handling for claim and admin failures.
Domain exceptions live here so services can raise them without importing FastAPI,
and a rule table maps them to HTTP responses so routes stay thin.
"""
from __future__ import annotations

from enum import Enum

from fastapi import HTTPException


class ClaimError(str, Enum):
    """Why a scan did not produce a claim. Values are the wire codes sent to clients."""

    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"
    DUPLICATE = "duplicate"
    WALLET_MISSING = "wallet_missing"
    WRITE_CONFLICT = "write_conflict"
    UNKNOWN = "unknown"


class GhostcoinError(Exception):
    """Base for domain errors raised by services."""


class InvalidDropInput(GhostcoinError):
    pass


class DropCodeTaken(GhostcoinError):
    pass


class ClaimNotFound(GhostcoinError):
    pass


class ClaimNotPayable(GhostcoinError):
    """Claim has no wallet address and the claimant's profile has none either."""


class InvalidClaimStatus(GhostcoinError):
    pass


class InvalidWalletAddress(GhostcoinError):
    pass


# ---------------------------------------------------------------------------
# User-facing messages per claim error
# ---------------------------------------------------------------------------

CLAIM_ERROR_MESSAGES: dict[ClaimError, str] = {
    ClaimError.INVALID_CODE: "This QR code is not a valid ghost drop.",
    ClaimError.EXPIRED: "This ghost drop has expired and can no longer be claimed.",
    ClaimError.DUPLICATE: "This ghost drop has already been claimed.",
    ClaimError.WALLET_MISSING: "Please set your wallet address in Settings before claiming rewards.",
    ClaimError.WRITE_CONFLICT: "Failed to claim ghost drop. Please try again.",
    ClaimError.UNKNOWN: "Failed to process claim. Please try again.",
}

CLAIM_ERROR_STATUS: dict[ClaimError, int] = {
    ClaimError.INVALID_CODE: 404,
    ClaimError.EXPIRED: 410,
    ClaimError.DUPLICATE: 409,
    ClaimError.WALLET_MISSING: 422,
    ClaimError.WRITE_CONFLICT: 409,
    ClaimError.UNKNOWN: 500,
}


def claim_error_to_http(error: ClaimError, message: str | None = None) -> HTTPException:
    """Rejected scan -> HTTPException with {error, message} detail."""
    return HTTPException(
        status_code=CLAIM_ERROR_STATUS.get(error, 500),
        detail={"error": error.value, "message": message or CLAIM_ERROR_MESSAGES[error]},
    )


# ---------------------------------------------------------------------------
# Domain exception rules: (exception type, status_code, error code). First match wins.
# Add new rules here instead of scattering try/except in routes.
# ---------------------------------------------------------------------------

DOMAIN_ERROR_RULES: list[tuple[type[GhostcoinError], int, str]] = [
    (InvalidDropInput, 422, "invalid_drop"),
    (DropCodeTaken, 409, "drop_code_taken"),
    (ClaimNotFound, 404, "claim_not_found"),
    (ClaimNotPayable, 409, "wallet_missing"),
    (InvalidClaimStatus, 422, "invalid_status"),
    (InvalidWalletAddress, 422, "invalid_wallet_address"),
]


def domain_error_to_http(exc: GhostcoinError) -> HTTPException:
    """
    Map a domain exception into an HTTPException.
    Uses DOMAIN_ERROR_RULES for known types; otherwise 500 with the exception message.
    """
    for exc_type, status_code, code in DOMAIN_ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail={"error": code, "message": str(exc)})
    return HTTPException(status_code=500, detail={"error": "internal", "message": str(exc)})
