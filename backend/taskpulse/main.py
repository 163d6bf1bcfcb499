"""
TaskPulse - personal task tracking with per-user completion insights.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager

from taskpulse.database import init_db
from taskpulse.routes import tasks, stats, insights, members
from taskpulse.exceptions import ERROR_RESPONSES, register_exception_handlers
from taskpulse.logging_config import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting TaskPulse API...")
    await init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down TaskPulse API...")


app = FastAPI(
    title="TaskPulse",
    description="Personal task tracking with completion stats and duration estimates",
    version="0.1.0",
    lifespan=lifespan,
)

# Register custom exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"], responses=ERROR_RESPONSES)
app.include_router(stats.router, prefix="/stats", tags=["Stats"], responses=ERROR_RESPONSES)
app.include_router(insights.router, prefix="/insights", tags=["Insights"], responses=ERROR_RESPONSES)
app.include_router(members.router, prefix="/members", tags=["Members"], responses=ERROR_RESPONSES)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
