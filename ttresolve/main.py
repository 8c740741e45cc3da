import functools
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ttresolve.api import health, resolve
from ttresolve.config.settings import config
from ttresolve.core.errors import ResolverError
from ttresolve.core.logging import REQUEST_ID_HEADER, log_error, log_warning, new_request_id, setup_logging
from ttresolve.core.state import state
from ttresolve.i18n import i18n
from ttresolve.utils.locale import get_locale

setup_logging(config.logging)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=config.api.title,
    description=config.api.description,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "Content-Length", REQUEST_ID_HEADER],
)


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request.state.request_id
    return response


@app.exception_handler(ResolverError)
async def resolver_error_handler(request: Request, exc: ResolverError):
    _ = functools.partial(i18n.get, locale=get_locale(request.headers.get("accept-language")))

    if exc.status_code >= 500:
        log_error(request, f"{type(exc).__name__}: {exc}")
    else:
        log_warning(request, f"{type(exc).__name__}: {exc}")

    return JSONResponse(status_code=exc.status_code, content={"error": _(exc.message_key)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    _ = functools.partial(i18n.get, locale=get_locale(request.headers.get("accept-language")))
    errors = exc.errors()
    reason = errors[0].get("msg", "malformed body") if errors else "malformed body"
    log_warning(request, f"Rejected request: {reason}")
    return JSONResponse(status_code=400, content={"error": _("error.invalid_request", reason=reason)})


# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(resolve.router, tags=["Resolve"])


@app.on_event("startup")
async def startup_event():
    state.ready = True
    logger.info(f"{config.api.title} {config.api.version} started")


@app.on_event("shutdown")
async def shutdown_event():
    state.ready = False
