from __future__ import annotations

import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

from persistence.errors import StoreError
from persistence.repositories import open_collections
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error. Check logs for more details"


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("LeafCare API starting: data_dir=%s", app.state.settings.data_dir)
    yield


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        load_dotenv("local.env")
        settings = get_settings()

    from endpoints.auth_endpoints import router as auth_router
    from endpoints.plant_endpoints import router as plants_router
    from endpoints.pot_endpoints import router as pots_router
    from endpoints.user_endpoints import router as users_router

    app = FastAPI(title="LeafCare API", lifespan=lifespan)
    app.state.settings = settings
    # InvalidStateError from a corrupt collection file aborts startup here.
    app.state.collections = open_collections(settings.data_dir)

    async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("UNHANDLED %s on %s %s", type(exc).__name__, request.method, request.url.path, exc_info=exc)
        return JSONResponse({"message": SERVER_ERROR_MESSAGE}, status_code=500)

    app.add_exception_handler(StoreError, server_error_handler)
    app.add_exception_handler(Exception, server_error_handler)

    if settings.debug_log_requests:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            response = await call_next(request)
            logger.info("REQUEST: %s %s -> %s", request.method, request.url.path, response.status_code)
            return response

    @app.get("/")
    async def root():
        return {"message": "Hello from LeafCare API"}

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(pots_router)
    app.include_router(plants_router)

    return app
