from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from config.database import Base
from datetime import datetime
import uuid


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    retailer_id = Column(String(36), ForeignKey("retailers.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    category = Column(String(100), nullable=True, index=True)
    image_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    retailer = relationship("Retailer", back_populates="products")
    orders = relationship("Order", back_populates="product")

    def __repr__(self):
        return f"<Product(name={self.name}, stock={self.stock})>"
