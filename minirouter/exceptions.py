class HTTPException(Exception):
    def __init__(self, status: int, message: str = "HTTP exception"):
        super().__init__(message)
        self.status = status


class BadRequest(HTTPException):
    def __init__(self, message=None):
        super().__init__(400, message or "Bad request")


class BadRequestFormat(BadRequest):
    def __init__(self, message: str, inner_exception=None):
        super().__init__(message)
        self.inner_exception = inner_exception


class NotFound(HTTPException):
    def __init__(self, message=None):
        super().__init__(404, message or "Not found")


class InternalServerError(HTTPException):
    def __init__(self, source_error: Exception = None):
        super().__init__(500, "Internal server error")
        self.source_error = source_error


class MessageAborted(Exception):
    def __init__(self):
        super().__init__(
            "The message was aborted before the client sent its whole content."
        )
