"""SceneIt engine exception hierarchy."""


class SceneItError(Exception):
    """Base exception for all SceneIt errors."""

    status_code = 500

    def __init__(self, message: str = "", code: str = "SCENEIT_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidImageError(SceneItError):
    """Raised when the uploaded image is missing or not a base64 data URL."""

    status_code = 400

    def __init__(self, message: str = "Invalid image format"):
        super().__init__(message, code="INVALID_IMAGE")


class ImageTooLargeError(SceneItError):
    """Raised when the decoded image exceeds the configured size limit."""

    status_code = 413

    def __init__(self, message: str = "Image too large"):
        super().__init__(message, code="IMAGE_TOO_LARGE")


class EnhancementNotConfiguredError(SceneItError):
    """Raised when no API key is configured for the enhancement service."""

    def __init__(self, message: str = "API key not configured"):
        super().__init__(message, code="NOT_CONFIGURED")


class EnhancementUnavailableError(SceneItError):
    """Raised when the enhancement service fails at the transport level."""

    status_code = 502

    def __init__(self, message: str = "Enhancement service unavailable. Check API key and quota."):
        super().__init__(message, code="UPSTREAM_UNAVAILABLE")


class EnhancementTimeoutError(SceneItError):
    """Raised when the enhancement service does not answer within the timeout."""

    status_code = 504

    def __init__(self, message: str = "Enhancement timed out"):
        super().__init__(message, code="UPSTREAM_TIMEOUT")


class EnhancementRefusedError(SceneItError):
    """Raised when the model answers with text instead of an image."""

    def __init__(self, message: str = "No image in response"):
        super().__init__(message, code="NO_IMAGE")


class NoEnhancementError(SceneItError):
    """Raised when the model returns no candidates at all."""

    def __init__(self, message: str = "No enhancement generated"):
        super().__init__(message, code="NO_CANDIDATES")


class InvalidQueryError(SceneItError):
    """Raised when a query parameter cannot be interpreted."""

    status_code = 400

    def __init__(self, message: str = "Invalid query"):
        super().__init__(message, code="INVALID_QUERY")


class AdminUnauthorizedError(SceneItError):
    """Raised when an admin-only endpoint is hit without a valid session."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")
