import logging
import uuid
from typing import Any

from fastapi import Request
from rich.logging import RichHandler

from ttresolve.config.settings import LoggingConfig

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def setup_logging(logging_config: LoggingConfig) -> None:
    """Install the root handler (rich console or plain stream)."""
    if logging_config.enable_rich:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(logging_config.format))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging_config.level)


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def log_with_context(
    request: Request,
    level: int,
    message: str,
    **kwargs: Any
) -> None:
    """
    Log with request context.
    Automatically includes request_id for tracing.
    """
    extra = {
        "request_id": getattr(request.state, "request_id", "unknown"),
        **kwargs
    }
    logger.log(level, f"[{extra['request_id']}] {message}", extra=extra)

def log_info(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.INFO, message, **kwargs)

def log_error(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.ERROR, message, **kwargs)

def log_warning(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.WARNING, message, **kwargs)

def log_debug(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.DEBUG, message, **kwargs)
