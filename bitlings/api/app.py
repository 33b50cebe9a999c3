import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bitlings.api.routes import router
from bitlings.config import Settings
from bitlings.errors import BitlingsError
from bitlings.services.container import Services, build_services

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Bitlings API ready (store: {services.db.db_path})")
        yield
        services.close()

    app = FastAPI(title="Bitlings API", lifespan=lifespan)
    app.state.services = services
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BitlingsError)
    async def handle_bitlings_error(request: Request, exc: BitlingsError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in errors
        )
        logger.warning(f"{request.method} {request.url.path} invalid request: {message}")
        return JSONResponse(
            status_code=400,
            content={"message": message or "Invalid request", "errors": jsonable_encoder(errors)},
        )

    app.include_router(router)
    return app
