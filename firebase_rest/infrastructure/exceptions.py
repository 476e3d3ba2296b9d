"""Infrastructure exceptions for Firestore REST calls.

Request errors extend FirebaseException so callers can handle transport
and mapping failures through one base class.
"""

from firebase_rest.domain.exceptions import FirebaseException


class FirestoreRequestException(FirebaseException):
    """Base exception for a failed Firestore REST request."""

    status_code: int | None = None

    def __init__(self, url: str, response_body: str = "", error_code: str | None = None) -> None:
        super().__init__(
            f"Firestore request failed ({self.status_code}): {url}",
            error_code,
            {"url": url, "status_code": self.status_code, "response": response_body},
        )


class FirestoreBadRequestException(FirestoreRequestException):
    """400: malformed request or invalid field values."""

    status_code = 400

    def __init__(self, url: str, response_body: str = "") -> None:
        super().__init__(url, response_body, "FIRESTORE_BAD_REQUEST")


class FirestoreUnauthorizedException(FirestoreRequestException):
    """401/403: missing, expired or insufficient credentials."""

    status_code = 401

    def __init__(self, url: str, response_body: str = "") -> None:
        super().__init__(url, response_body, "FIRESTORE_UNAUTHORIZED")


class FirestorePaymentRequiredException(FirestoreRequestException):
    """402: project billing is required."""

    status_code = 402

    def __init__(self, url: str, response_body: str = "") -> None:
        super().__init__(url, response_body, "FIRESTORE_PAYMENT_REQUIRED")


class FirestoreNotFoundException(FirestoreRequestException):
    """404: document or database not found."""

    status_code = 404

    def __init__(self, url: str, response_body: str = "") -> None:
        super().__init__(url, response_body, "FIRESTORE_NOT_FOUND")


class DocumentExistsError(FirestoreRequestException):
    """409: createDocument was called with an ID that already exists."""

    status_code = 409

    def __init__(self, url: str, response_body: str = "") -> None:
        super().__init__(url, response_body, "FIRESTORE_ALREADY_EXISTS")


class FirestorePreconditionFailedException(FirestoreRequestException):
    """412: a write precondition (exists / updateTime) did not hold."""

    status_code = 412

    def __init__(self, url: str, response_body: str = "") -> None:
        super().__init__(url, response_body, "FIRESTORE_PRECONDITION_FAILED")


class FirestoreInternalServerErrorException(FirestoreRequestException):
    """500: server-side failure."""

    status_code = 500

    def __init__(self, url: str, response_body: str = "") -> None:
        super().__init__(url, response_body, "FIRESTORE_INTERNAL_ERROR")


class FirestoreServiceUnavailableException(FirestoreRequestException):
    """503: service temporarily unavailable."""

    status_code = 503

    def __init__(self, url: str, response_body: str = "") -> None:
        super().__init__(url, response_body, "FIRESTORE_SERVICE_UNAVAILABLE")


class FirestoreUndefinedException(FirestoreRequestException):
    """Any other non-success status; keeps the raw status and body."""

    def __init__(self, url: str, status_code: int, response_body: str = "") -> None:
        self.status_code = status_code
        super().__init__(url, response_body, "FIRESTORE_UNDEFINED_ERROR")


_STATUS_MAP: dict[int, type[FirestoreRequestException]] = {
    400: FirestoreBadRequestException,
    401: FirestoreUnauthorizedException,
    402: FirestorePaymentRequiredException,
    403: FirestoreUnauthorizedException,
    404: FirestoreNotFoundException,
    409: DocumentExistsError,
    412: FirestorePreconditionFailedException,
    500: FirestoreInternalServerErrorException,
    503: FirestoreServiceUnavailableException,
}


def exception_for_status(url: str, status_code: int, response_body: str = "") -> FirestoreRequestException:
    """Return the typed exception for an HTTP status code."""
    exc_type = _STATUS_MAP.get(status_code)
    if exc_type is None:
        return FirestoreUndefinedException(url, status_code, response_body)
    return exc_type(url, response_body)
