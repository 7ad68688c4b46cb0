class ServiceError(Exception):
    pass


class InvalidRequestError(ServiceError):
    pass


class InvalidURLError(InvalidRequestError):
    pass


class UnsupportedPlatformError(InvalidRequestError):
    pass


class TitleTooLongError(InvalidRequestError):
    def __init__(self, max_length: int):
        super().__init__(f"Title must be {max_length} characters or fewer.")
        self.max_length = max_length


class FetchFailedError(ServiceError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkTimeoutError(ServiceError):
    def __init__(self, url: str, timeout_seconds: float | None):
        super().__init__(f"Network timeout after {timeout_seconds}s: {url}")
        self.url = url
        self.timeout_seconds = timeout_seconds
