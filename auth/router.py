from fastapi import APIRouter, Depends, status
from sqlalchemy import orm
from sqlalchemy.exc import IntegrityError
import logging

from config.database import get_db
from models import Retailer
from retailer.schema import RetailerRegistration, RetailerResponse
from shared_utils.auth import get_current_user, get_current_user_id, get_current_retailer
from shared_utils.errors import ConflictError
from shared_utils.responses import envelope, dump

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"]
)
logger = logging.getLogger(__name__)

ALREADY_REGISTERED = "A retailer profile already exists for this account"


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_retailer(
    payload: RetailerRegistration,
    user_id: str = Depends(get_current_user_id),
    db: orm.Session = Depends(get_db)
):
    """
    Create the retailer profile for an identity the identity provider
    already issued a token to. One profile per identity.
    """
    if db.query(Retailer.id).filter(Retailer.user_id == user_id).first() is not None:
        raise ConflictError(ALREADY_REGISTERED)

    retailer = Retailer(user_id=user_id, name=payload.name, email=payload.email, theme="default")
    try:
        db.add(retailer)
        db.commit()
    except IntegrityError:
        # Concurrent registration for the same identity
        db.rollback()
        raise ConflictError(ALREADY_REGISTERED)
    except Exception:
        db.rollback()
        raise
    db.refresh(retailer)

    logger.info(f"Retailer {retailer.id} registered for user {user_id}", extra={"retailer_id": retailer.id})
    return envelope(dump(RetailerResponse, retailer), message="Registration successful")


@router.get("/me")
def get_profile(
    user: dict = Depends(get_current_user),
    retailer: Retailer = Depends(get_current_retailer)
):
    return envelope({"user": user, "retailer": dump(RetailerResponse, retailer)})
