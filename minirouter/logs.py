import logging

from minirouter.exceptions import HTTPException, MessageAborted


def get_logger() -> logging.Logger:
    logger = logging.getLogger("minirouter.server")
    logger.setLevel(logging.INFO)
    return logger


def get_access_logger() -> logging.Logger:
    return logging.getLogger("minirouter.access")


def get_logged_url(request) -> str:
    if request._raw_query:
        return request.path + "?<query is hidden>"
    return request.path


def access_logging_middleware(next_handler):
    """
    Middleware factory logging each request handled by the wrapped handler, and
    unhandled exceptions. Query strings are not logged.

        api = root.with_middleware(access_logging_middleware)
    """
    access_logger = get_access_logger()
    app_logger = get_logger()

    async def logging_handler(response, request):
        try:
            await next_handler(response, request)
        except HTTPException:
            raise
        except MessageAborted:
            app_logger.warning(
                "The connection was lost or aborted while the request was being "
                "sent. %s %s",
                request.method.ljust(8),
                get_logged_url(request),
            )
            raise
        except Exception:
            app_logger.exception(
                "Unhandled exception while handling: %s %s",
                request.method,
                get_logged_url(request),
            )
            raise
        access_logger.debug(
            "%s %s -> %s", request.method.ljust(8), get_logged_url(request), response.status
        )

    return logging_handler
