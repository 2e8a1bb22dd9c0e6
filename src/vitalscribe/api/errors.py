class APIError(Exception):
    def __init__(self, code: str, message: str, http_status: int = 400, details: dict = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details


class ValidationError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("INVALID_INPUT", message, 422, details)


class NotFoundError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("NOT_FOUND", message, 404, details)


class UnauthorizedError(APIError):
    def __init__(self, message: str = "Unauthorized", details: dict = None):
        super().__init__("UNAUTHORIZED", message, 401, details)


# Upload limits
class PayloadTooLargeError(APIError):
    def __init__(self, size_bytes: int, limit_bytes: int):
        super().__init__(
            "FILE_TOO_LARGE",
            f"Uploaded file exceeds the {limit_bytes // (1024 * 1024)} MB limit",
            413,
            {"size_bytes": size_bytes, "limit_bytes": limit_bytes},
        )


class UnsupportedFileTypeError(APIError):
    def __init__(self, filename: str, allowed: list):
        super().__init__(
            "UNSUPPORTED_FILE_TYPE",
            f"Unsupported file type ({filename}). Allowed: {', '.join(allowed)}",
            415,
            {"filename": filename, "allowed_extensions": list(allowed)},
        )
