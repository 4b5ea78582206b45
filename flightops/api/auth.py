"""Firebase Auth JWT verification dependency."""

from __future__ import annotations

import os
from dataclasses import dataclass

from fastapi import Header, HTTPException


@dataclass
class UserClaims:
    uid: str
    org_id: str
    email: str | None = None
    role: str | None = None


async def verify_firebase_token(
    authorization: str | None = Header(None, description="Bearer <Firebase ID token>"),
) -> UserClaims:
    """Extract and verify a Firebase Auth ID token from the Authorization header.

    The organization comes from the ``org_id`` custom claim; users
    without one work in a personal organization named after their UID.

    In development, set ``FLIGHTOPS_AUTH_DISABLED=1`` to bypass
    verification and use a fixed dispatcher.
    """
    if os.environ.get("FLIGHTOPS_AUTH_DISABLED") == "1":
        return UserClaims(
            uid="dev-user", org_id="dev-org", email="dev@localhost", role="dispatcher"
        )

    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    try:
        from firebase_admin import auth as firebase_auth

        decoded = firebase_auth.verify_id_token(token)
    except Exception as exc:
        raise HTTPException(status_code=401, detail=f"Invalid token: {exc}") from exc

    return UserClaims(
        uid=decoded["uid"],
        org_id=decoded.get("org_id") or decoded["uid"],
        email=decoded.get("email"),
        role=decoded.get("role"),
    )
