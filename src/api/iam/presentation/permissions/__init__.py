"""Permission status presentation slice."""

from iam.presentation.permissions.routes import router

__all__ = ["router"]
