"""Error taxonomy shared by the store, the services and the HTTP layer."""


class BitlingsError(Exception):
    """Base class. `status_code` is the HTTP status the API maps it to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BitlingsError):
    """Malformed or missing required input."""

    status_code = 400


class NotFoundError(BitlingsError):
    status_code = 404


class DuplicateVoteError(BitlingsError):
    """The identity already voted the same way on this proposal."""

    status_code = 409


class ConflictError(BitlingsError):
    """The write would break an at-most-one rule (stats, collection entry, status)."""

    status_code = 409


class ExternalServiceError(BitlingsError):
    """The generative backend is unreachable, unconfigured or failed."""

    status_code = 502
