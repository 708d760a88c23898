"""
Chef Jul Web API - FastAPI application.

Uses Supabase Auth for authentication. Recipe generation runs as
background tasks owned by the process-wide job supervisor.
"""

import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chefjul import __version__
from chefjul.config import configure_logging, settings
from chefjul.web.auth import AuthenticatedUser, get_current_user
from chefjul.web.chat_routes import router as chat_router
from chefjul.web.deps import get_supervisor
from chefjul.web.meal_plan_routes import router as meal_plan_router
from chefjul.web.recipe_routes import router as recipe_router
from chefjul.weeks import get_current_week_id

logger = logging.getLogger(__name__)

app = FastAPI(title="Chef Jul", version=__version__)


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    from chefjul.llm.prompt_logger import enable_prompt_logging

    configure_logging()
    if settings.chef_log_prompts:
        enable_prompt_logging(True)

    logger.info("Chef Jul starting up...")
    logger.info(f"  Environment: {settings.chef_env}")
    logger.info(f"  Document store: {settings.document_store}")
    logger.info(
        f"  Recipe batches: {settings.recipe_batch_size} per batch, "
        f"{settings.recipe_batch_delay_seconds}s apart"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Stop in-flight recipe runs so their status is not left generating."""
    await get_supervisor().shutdown()


# CORS middleware for the browser client
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router, prefix="/api")
app.include_router(meal_plan_router, prefix="/api")
app.include_router(recipe_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "activeRecipeJobs": get_supervisor().running_count,
    }


@app.get("/api/weeks/current")
async def current_week(user: AuthenticatedUser = Depends(get_current_user)):
    return {"weekId": get_current_week_id()}


def create_app() -> FastAPI:
    """Create and return the FastAPI application."""
    return app
