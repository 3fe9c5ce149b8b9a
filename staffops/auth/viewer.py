"""
viewer.py
---------
Purpose:
    Resolves the viewing user for dashboard endpoints.

Notes:
    - Authentication happens upstream; the gateway forwards the
      authenticated user's numeric id in the X-User-Id header.
    - Provides `viewer_dependency` for routes that need a viewer id.
"""

from fastapi import Header, HTTPException, status


def viewer_dependency(x_user_id: str | None = Header(None)) -> int:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )

    try:
        return int(x_user_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-User-Id header",
        ) from e
