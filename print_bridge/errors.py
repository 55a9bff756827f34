"""Error taxonomy shared by the gatekeeper, the printer directory and the dispatcher.

Every error is scoped to one request. The HTTP layer turns a BridgeError into
``{"error": kind, "message": message}`` with the class's status code.
"""


class BridgeError(Exception):
    status_code: int = 500
    default_message = "Internal error"

    def __init__(self, message: str = "", headers: dict[str, str] | None = None):
        self.message = message or self.default_message
        self.headers = headers or {}
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class PrinterError(BridgeError):
    """Printer discovery or status query failed."""

    default_message = "Printer discovery failed"


class PrintError(BridgeError):
    """Submission or conversion failed; message carries the tool's stderr."""

    default_message = "Print job failed"


class UnsupportedFormat(BridgeError):
    status_code = 400
    default_message = "Unsupported content type"


class IoError(BridgeError):
    """Filesystem or process-spawn failure."""

    default_message = "I/O failure while handling the print job"


class DecodeError(BridgeError):
    status_code = 400
    default_message = "Content is not valid base64"


class ConfigError(BridgeError):
    default_message = "Invalid configuration"


class Unauthorized(BridgeError):
    status_code = 401
    default_message = "Missing or invalid API token"


class RateLimitExceeded(BridgeError):
    status_code = 429
    default_message = "Rate limit exceeded"


class FileTooLarge(BridgeError):
    status_code = 413
    default_message = "Payload exceeds the configured size limit"


class TimedOut(BridgeError):
    status_code = 504
    default_message = "External print command timed out"


class InvalidRequest(BridgeError):
    status_code = 400
    default_message = "Invalid print request"
