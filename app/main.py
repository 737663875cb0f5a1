import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.v1.chat import router as chat_router
from api.v1.transfer import router as transfer_router
from api.v1.wallets import router as wallets_router
from app.config import get_settings
from app.core.errors import AppError
from app.core.langsmith import configure_langsmith
from app.core.logging import configure_logging
from app.core.middleware import RequestContextMiddleware
from db.session import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    s = get_settings()
    if s.DATABASE_URL and s.db_auto_create:
        init_db()
    yield


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed code=%s error=%s details=%s", request.method, request.url.path, exc.code, exc.message, exc.details)
    else:
        logger.info("%s %s rejected code=%s error=%s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "problem": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s crashed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error", "details": None})


def create_app() -> FastAPI:
    configure_logging()
    configure_langsmith()

    app = FastAPI(title="Safe Chat Service", version="0.1.0", lifespan=lifespan)
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(chat_router)
    app.include_router(transfer_router)
    app.include_router(wallets_router)

    @app.get("/healthz")
    async def healthz():
        s = get_settings()
        return {
            "ok": True,
            "llm_model": s.LLM_MODEL,
            "db_configured": bool(s.DATABASE_URL),
            "rpc_configured": bool(s.RPC_URL or s.RPC_URLS),
            "signer_configured": bool(s.AGENT_PRIVATE_KEY),
        }

    return app


app = create_app()
