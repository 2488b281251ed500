class ServiceError(Exception):
    pass


class GeminiConfigurationError(ServiceError):
    pass


class UpstreamError(ServiceError):
    def __init__(self, status: int | None, body: object = None):
        super().__init__(f"AI service error: {status}")
        self.status = status
        self.body = body


class UpstreamParseError(ServiceError):
    def __init__(self, message: str = "Could not parse recipe from AI response."):
        super().__init__(message)
