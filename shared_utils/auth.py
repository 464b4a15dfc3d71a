"""
Request identity helpers.

The JWT middleware in main.py verifies the bearer token and stores the
identity on request.state. These dependencies turn that identity into the
calling retailer (tenant) for the route handlers.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy import orm

from config.database import get_db
from models import Retailer
from .errors import UnauthorizedError, NotFoundError

logger = logging.getLogger(__name__)


def get_current_user_id(request: Request) -> str:
    """Identity of the token bearer, set by the JWT middleware"""
    user_id: Optional[str] = getattr(request.state, "user_id", None)
    if not user_id:
        raise UnauthorizedError("Access token is required. Please include Authorization header.")
    return user_id


def get_current_user(request: Request, user_id: str = Depends(get_current_user_id)) -> dict:
    return {"id": user_id, "email": getattr(request.state, "user_email", None)}


def get_current_retailer(
    user_id: str = Depends(get_current_user_id),
    db: orm.Session = Depends(get_db),
) -> Retailer:
    retailer = db.query(Retailer).filter(Retailer.user_id == user_id).one_or_none()
    if retailer is None:
        logger.info(f"No retailer profile for user {user_id}")
        raise NotFoundError("Retailer profile not found. Please complete registration.")
    return retailer
