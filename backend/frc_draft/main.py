from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from frc_draft.config import settings
from frc_draft.routers.drafts import router as drafts_router
from frc_draft.routers.health import router as health_router
from frc_draft.routers.me import router as me_router
from frc_draft.routers.teams import router as teams_router
from frc_draft.services.errors import DraftError
from frc_draft.websocket.draft_ws import router as ws_router

logger = logging.getLogger("frc_draft")


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _draft_error_handler(request: Request, exc: DraftError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="FRC Fantasy Draft API")

    allow_origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
    # In local dev the frontend may run on any localhost port.
    allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$" if settings.is_dev else None
    if not settings.is_dev and not allow_origins:
        allow_origin_regex = r"^https://.*\.vercel\.app$"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=allow_origin_regex,
        # Bearer tokens, not cookies.
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DraftError, _draft_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(me_router, prefix=settings.api_prefix)
    app.include_router(teams_router, prefix=settings.api_prefix)
    app.include_router(drafts_router, prefix=settings.api_prefix)
    app.include_router(ws_router)
    return app


app = create_app()
