"""
Shared FastAPI dependencies.

Routes receive the store, the job supervisor and the recipe generator via
Depends() so tests can swap them through `app.dependency_overrides`.
"""

from fastapi import Depends, HTTPException

from chefjul.background.recipe_generator import RecipeGenerator
from chefjul.background.supervisor import RecipeJobSupervisor
from chefjul.config import settings
from chefjul.db import get_document_store
from chefjul.db.store import DocumentStore
from chefjul.errors import (
    ChefJulError,
    GenerationInProgressError,
    InvalidRequestError,
    MealPlanNotFoundError,
)

# One supervisor per process
_supervisor: RecipeJobSupervisor | None = None


def get_store() -> DocumentStore:
    return get_document_store()


def get_supervisor() -> RecipeJobSupervisor:
    global _supervisor

    if _supervisor is None:
        _supervisor = RecipeJobSupervisor()

    return _supervisor


def get_recipe_generator(store: DocumentStore = Depends(get_store)) -> RecipeGenerator:
    return RecipeGenerator(
        store,
        batch_size=settings.recipe_batch_size,
        batch_delay_seconds=settings.recipe_batch_delay_seconds,
    )


def to_http_error(error: ChefJulError) -> HTTPException:
    """Map a domain error to its HTTP status."""
    if isinstance(error, InvalidRequestError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, MealPlanNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, GenerationInProgressError):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
