from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import structlog
import logging

from core.config import settings
from core.store import store

from routes.routes import router as rest_router


logging.basicConfig(level=logging.INFO, format="%(message)s")

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)
log = structlog.get_logger(__name__)

app = FastAPI(title="Dare Centre events")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,  # session cookie carries the admin flag and contest flow
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rest_router)


@app.on_event("startup")
async def report_backend():
    """
    Logs whether the remote store is available; forms answer with a
    "backend not configured" error while it is not.
    """
    log.info("app.startup", store_configured=store is not None)
