# front_desk/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from front_desk.config import ALLOWED_ORIGINS
from front_desk.logging_config import setup_logging
from front_desk.middleware import RequestIDMiddleware
from front_desk.routes._error_handlers import register_error_handlers
from front_desk.routes.health import router as health_router
from front_desk.routes.metrics import router as metrics_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Front Desk API",
    description="Operational endpoints for the booking lifecycle and shift accounting core",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

register_error_handlers(app)

app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])

logger.info("front_desk_app_initialized", origins=ALLOWED_ORIGINS)
