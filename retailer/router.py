from fastapi import APIRouter, Depends
from sqlalchemy import orm
from uuid import UUID
from datetime import datetime
import logging

from config.database import get_db
from models import Retailer
from product.models import Product
from shared_utils.auth import get_current_retailer
from shared_utils.errors import InputValidationError, NotFoundError
from shared_utils.responses import envelope, dump, dump_many
from .dashboard import build_dashboard
from .schema import RetailerSettingsUpdate, ThemeUpdate, RetailerResponse, PublicStoreInfo, PublicProduct

router = APIRouter(
    prefix="/api/retailer",
    tags=["retailer"]
)
logger = logging.getLogger(__name__)

THEME_CATALOG = [
    {"id": "default", "name": "Default", "description": "Clean and simple design", "preview": "/themes/default-preview.jpg"},
    {"id": "modern", "name": "Modern", "description": "Contemporary and sleek", "preview": "/themes/modern-preview.jpg"},
    {"id": "classic", "name": "Classic", "description": "Traditional and elegant", "preview": "/themes/classic-preview.jpg"},
    {"id": "minimal", "name": "Minimal", "description": "Simple and focused", "preview": "/themes/minimal-preview.jpg"},
    {"id": "bold", "name": "Bold", "description": "Vibrant and eye-catching", "preview": "/themes/bold-preview.jpg"},
]


def _save(db: orm.Session, retailer: Retailer) -> Retailer:
    retailer.updated_at = datetime.utcnow()
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(retailer)
    return retailer


@router.get("/settings")
def get_settings(retailer: Retailer = Depends(get_current_retailer)):
    return envelope(dump(RetailerResponse, retailer))


@router.put("/settings")
def update_settings(
    payload: RetailerSettingsUpdate,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    changes = payload.to_columns()
    if not changes:
        raise InputValidationError("No valid fields to update")

    for field, value in changes.items():
        setattr(retailer, field, value)
    _save(db, retailer)

    logger.info(f"Settings updated: {sorted(changes)}", extra={"retailer_id": retailer.id})
    return envelope(dump(RetailerResponse, retailer), message="Settings updated successfully")


@router.get("/dashboard")
def get_dashboard(
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    return envelope(build_dashboard(db, retailer))


@router.get("/themes")
def get_themes(retailer: Retailer = Depends(get_current_retailer)):
    return envelope(THEME_CATALOG)


@router.patch("/theme")
def update_theme(
    payload: ThemeUpdate,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    retailer.theme = payload.theme
    _save(db, retailer)

    logger.info(f"Theme changed to {payload.theme}", extra={"retailer_id": retailer.id})
    return envelope(dump(RetailerResponse, retailer), message=f"Theme updated to '{payload.theme}'")


@router.get("/store/{retailer_id}")
def get_public_store(retailer_id: UUID, db: orm.Session = Depends(get_db)):
    """Customer-facing storefront: branding plus what is actually for sale"""
    store = db.query(Retailer).filter(Retailer.id == str(retailer_id)).one_or_none()
    if store is None:
        raise NotFoundError("Store not found or not available")

    products = (db.query(Product)
                .filter(Product.retailer_id == store.id,
                        Product.is_active.is_(True),
                        Product.stock > 0)
                .order_by(Product.created_at.desc())
                .all())

    return envelope({
        "store": dump(PublicStoreInfo, store),
        "products": dump_many(PublicProduct, products),
        "productCount": len(products),
    })
