"""FastAPI application and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from starlette.responses import JSONResponse

from catalog_grader.api.http.app_data import ApplicationDependencies
from catalog_grader.api.http.routers import (
    attributes,
    bulk_upload,
    categories,
    generation,
    grading,
    health,
    llm_providers,
    metrics,
    performance_metrics,
    products,
    prompts,
    users,
)
from catalog_grader.api.utils.app_startup import configure_logging
from catalog_grader.core.errors import CatalogError, GenerationError
from catalog_grader.core.services import (
    DbManageService,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    OpenAICompletionProvider,
)
from catalog_grader.runtime.context import get_config

configure_logging()


# --- FastAPI app setup ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title="catalog-grader",
    lifespan=lifespan,
    docs_url=None if get_config().app.environment == "production" else "/docs",
    redoc_url=None if get_config().app.environment == "production" else "/redoc",
)

__all__ = ["app", "startup", "shutdown"]

# --- CORS configuration ---
if get_config().app.environment == "production" and "*" in get_config().app.cors.origins:
    raise RuntimeError(
        "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().app.cors.origins,
    allow_credentials=get_config().app.cors.allow_credentials,
    allow_methods=get_config().app.cors.allow_methods,
    allow_headers=get_config().app.cors.allow_headers,
)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


# --- Error rendering ---
@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    log = logger.bind(**exc.context).bind(status_code=exc.status_code, error=exc.code)
    if exc.status_code >= 500:
        cause = exc.cause if isinstance(exc, GenerationError) else exc.__cause__
        log.opt(exception=cause).error("{}", exc.message)
    else:
        log.info("{}", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_payload(), "request_id": _request_id(request)},
    )


@app.exception_handler(PydanticValidationError)
async def model_validation_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "detail": exc.errors(include_url=False, include_context=False, include_input=False),
            "error": "validation_error",
            "request_id": _request_id(request),
        },
    )


# --- Request logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except HTTPException as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=exc.status_code,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.detail, "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        except RequestValidationError as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=422,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.validation_error")
            return JSONResponse(
                status_code=422,
                content={"detail": exc.errors(), "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


# --- Router registration ---
app.include_router(health.router)
app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(categories.router, prefix="/categories", tags=["categories"])
app.include_router(attributes.router, prefix="/attributes", tags=["attributes"])
app.include_router(products.router, prefix="/products", tags=["products"])
app.include_router(llm_providers.router, prefix="/llm-providers", tags=["llm-providers"])
app.include_router(prompts.router, prefix="/prompts", tags=["prompts"])
app.include_router(
    performance_metrics.router, prefix="/performance-metrics", tags=["performance-metrics"]
)
app.include_router(generation.router, tags=["generation"])
app.include_router(grading.router, prefix="/grade", tags=["grading"])
app.include_router(metrics.router, tags=["metrics"])
app.include_router(bulk_upload.router, tags=["bulk-upload"])


# --- Lifecycle hooks ---
async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    if not config.app.session_signing_secret:
        logger.warning("session_signing_secret is not set; every bearer token will be rejected")

    database_service = DbSessionService()
    if config.database.auto_create_tables:
        DbManageService(database_service.engine).create_all()

    app.state.app_dependencies = ApplicationDependencies(
        jwt_verify_service=JwtVerificationService(),
        jwt_generation_service=JwtGeneratorService(),
        database_service=database_service,
        completion_provider=OpenAICompletionProvider(),
    )


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None:
        app_dependencies.database_service.engine.dispose()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # the middleware logs requests
    )
