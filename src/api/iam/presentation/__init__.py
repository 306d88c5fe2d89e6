"""IAM presentation layer.

Organizes presentation concerns in vertical slices. Each slice package
contains its own routes and models.
"""

from __future__ import annotations

from fastapi import APIRouter

from iam.presentation import permissions

# Auth is enforced per-endpoint (each handler declares its own Depends).
router = APIRouter(
    prefix="/iam",
    tags=["iam"],
)

router.include_router(permissions.router)

__all__ = ["router"]
