"""
Authentication dependencies for FastAPI.

Sign-up and sign-in happen at the identity provider. It hands the browser
an HS256 bearer token whose `sub` is the user's uid; this module only
verifies that token and loads (or creates) the matching user document.
"""

import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import database
import settings
from database import utcnow
from schemas import ROLE_ADMIN, ROLE_USER

logger = logging.getLogger("storefront.auth")

security = HTTPBearer(auto_error=False)

AVATAR_URL = "https://api.dicebear.com/7.x/adventurer/svg?seed={seed}"


def get_db():
    if database.db is None:
        raise HTTPException(status_code=500, detail="Database not available")
    return database.db


def decode_token(token: str) -> dict:
    options = {"require": ["sub", "exp"]}
    if settings.AUTH_AUDIENCE:
        return jwt.decode(token, settings.AUTH_SECRET, algorithms=["HS256"],
                          audience=settings.AUTH_AUDIENCE, options=options)
    return jwt.decode(token, settings.AUTH_SECRET, algorithms=["HS256"],
                      options={**options, "verify_aud": False})


def load_user(db, uid: str, email=None) -> dict:
    """User profile for `uid`, created with defaults the first time we see it."""
    doc = db["user"].find_one({"_id": uid})
    if not doc:
        now = utcnow()
        doc = {
            "_id": uid,
            "email": email,
            "name": "",
            "avatar": "",
            "role": ROLE_USER,
            "created_at": now,
            "updated_at": now,
        }
        db["user"].insert_one(doc)
        logger.info("Created profile for %s", uid)

    return {
        "uid": uid,
        "email": doc.get("email") or email,
        "name": doc.get("name") or "",
        "avatar": doc.get("avatar") or AVATAR_URL.format(seed=uid),
        "role": doc.get("role") or ROLE_USER,
    }


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db=Depends(get_db),
) -> dict:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please log in",
        )
    try:
        claims = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
        )

    return load_user(db, str(claims["sub"]), claims.get("email"))


def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if user["role"] != ROLE_ADMIN:
        logger.warning("Unauthorized admin access attempt: %s", user.get("email"))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
