"""
Chef Jul - Exceptions.

Raised by the job control surface and the document store; the web layer
maps them to HTTP status codes.
"""


class ChefJulError(Exception):
    """Base class for Chef Jul errors."""


class InvalidRequestError(ChefJulError, ValueError):
    """Missing or malformed caller input (user id, week id)."""


class MealPlanNotFoundError(ChefJulError, LookupError):
    """No meal plan document exists for the requested week."""

    def __init__(self, user_id: str, week_id: str):
        self.user_id = user_id
        self.week_id = week_id
        super().__init__(f"No meal plan for week {week_id}")


class GenerationInProgressError(ChefJulError, RuntimeError):
    """A recipe generation run is already active for this week."""

    def __init__(self, week_id: str):
        self.week_id = week_id
        super().__init__(f"Recipe generation already in progress for week {week_id}")


class DocumentNotFoundError(ChefJulError, LookupError):
    """A field update targeted a document that does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Document not found: {path}")
