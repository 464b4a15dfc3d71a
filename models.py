import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from config.database import Base

# Storefront themes a retailer can pick from
THEMES = ("default", "modern", "classic", "minimal", "bold")


def new_id() -> str:
    return str(uuid.uuid4())


class Retailer(Base):
    __tablename__ = "retailers"
    __table_args__ = (
        CheckConstraint("theme IN ('default', 'modern', 'classic', 'minimal', 'bold')", name="ck_retailers_theme"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)

    # Storefront branding
    logo_url = Column(String(500), nullable=True)
    banner_url = Column(String(500), nullable=True)
    primary_color = Column(String(20), nullable=True)
    secondary_color = Column(String(20), nullable=True)
    font = Column(String(100), nullable=True)
    nav_menu = Column(JSON, nullable=True)
    layout_preference = Column(String(50), nullable=True)
    contact_info = Column(JSON, nullable=True)
    social_links = Column(JSON, nullable=True)
    footer_text = Column(Text, nullable=True)
    theme = Column(String(20), default="default", nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    products = relationship("Product", back_populates="retailer")
    orders = relationship("Order", back_populates="retailer")

    def __repr__(self):
        return f"<Retailer(id={self.id}, name={self.name})>"


from product.models import Product
from orders.models import Order
