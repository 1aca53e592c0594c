class ServiceError(Exception):
    pass


class RateLimitError(ServiceError):
    def __init__(
        self, message: str = "Rate limit exceeded", retry_after: float | None = None
    ) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class AuthenticationError(ServiceError):
    pass


class NotFoundError(ServiceError):
    pass


class NotConfiguredError(ServiceError):
    pass
