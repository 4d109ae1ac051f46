"""
Error taxonomy for bet placement and settlement.

Every error carries an HTTP status so the API layer can map it with a
single handler. InternalError never exposes its detail to the caller.
"""


class CasinoError(Exception):
    """Base class for all expected casino failures."""

    status_code = 400
    public_message = None

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    @property
    def detail(self) -> str:
        return self.public_message or self.message


class ValidationError(CasinoError):
    """Missing or out-of-range input. Never retried."""

    status_code = 400


class NonceError(CasinoError):
    """Nonce absent, expired or already consumed. Caller must request a new one."""

    status_code = 400


class OwnershipError(CasinoError):
    """Requester does not own the bet (or bet history) it is acting on."""

    status_code = 403


class NotFoundError(CasinoError):
    """Unknown bet or game."""

    status_code = 404


class ConflictError(CasinoError):
    """Settlement attempted on a bet that is no longer PENDING."""

    status_code = 409


class InternalError(CasinoError):
    """Storage or crypto failure. Logged in full, surfaced opaquely."""

    status_code = 500
    public_message = "Internal error. Please try again later."
