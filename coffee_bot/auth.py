"""
Authentication Module for Coffee Bot
====================================

There is a single shared admin secret, ADMIN_PASSWORD (see config.py). It is
used in two places:

1. **Chat admin mode**: after pressing "enter password" the user types the
   secret; check_admin_secret() decides whether the session becomes admin.

2. **HTTP Basic Auth (Admin REST)**: /admin/* endpoints require
   ADMIN_USERNAME / ADMIN_PASSWORD via verify_admin_credentials().

Both comparisons are exact string equality done with secrets.compare_digest()
so the time taken does not depend on how many characters matched. The secret
is not hashed and never rotated. An empty ADMIN_PASSWORD disables admin
access entirely (chat logins always fail, admin endpoints answer 503).

Usage:
------
    from coffee_bot.auth import verify_admin_credentials

    @router.get("/admin/menu")
    def list_menu(_admin: str = Depends(verify_admin_credentials)):
        ...
"""

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from . import config


# =============================================================================
# Chat Admin Secret
# =============================================================================

def check_admin_secret(candidate: str, secret: str) -> bool:
    """Exact, constant-time comparison of a typed password with the secret."""
    if not secret:
        return False
    return secrets.compare_digest(
        (candidate or "").encode("utf-8"),
        secret.encode("utf-8"),
    )


# =============================================================================
# HTTP Basic Auth Setup
# =============================================================================
# The realm is shared across all admin routes so browsers cache credentials.

security = HTTPBasic(realm="CoffeeBot Admin")


def verify_admin_credentials(
    credentials: HTTPBasicCredentials = Depends(security),
) -> str:
    """
    Verify HTTP Basic Auth credentials for admin endpoints.

    Returns:
        str: The authenticated username if credentials are valid.

    Raises:
        HTTPException (503): ADMIN_PASSWORD is not configured.
        HTTPException (401): Invalid credentials. Includes WWW-Authenticate
                            header to trigger the browser's auth prompt.
    """
    # Fail closed: if password not configured, deny all access
    if not config.ADMIN_PASSWORD:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin authentication not configured. Set ADMIN_PASSWORD environment variable.",
        )

    username_correct = secrets.compare_digest(
        credentials.username.encode("utf-8"),
        config.ADMIN_USERNAME.encode("utf-8"),
    )
    password_correct = check_admin_secret(credentials.password, config.ADMIN_PASSWORD)

    if not (username_correct and password_correct):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username
