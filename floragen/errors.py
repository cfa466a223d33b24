"""Error types raised by the plant pipeline and the HTTP status each maps to."""


class FloraGenError(Exception):
    """Base class for every error that can reach the HTTP boundary."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadInput(FloraGenError):
    """Missing or invalid request fields, or a name that is not a cultivable plant."""


class NotFound(FloraGenError):
    pass


class Conflict(FloraGenError):
    """A record with the same (name, language) or (slug, language) already exists."""


class InternalError(FloraGenError):
    pass


class GenerationError(FloraGenError):
    pass


class GenerationBlocked(GenerationError):
    """The upstream safety filter rejected the prompt."""

    def __init__(self, reason: str, message: str):
        super().__init__(f"Text generation blocked by Gemini: {message} (reason: {reason})")
        self.reason = reason
        self.detail = message


class GenerationFailed(GenerationError):
    pass


STATUS_CODES = {
    BadInput: 400,
    NotFound: 404,
    Conflict: 409,
    InternalError: 500,
    GenerationBlocked: 400,
    GenerationFailed: 500,
}


def status_code_for(error: FloraGenError) -> int:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return 500
