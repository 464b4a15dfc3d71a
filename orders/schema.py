from pydantic import BaseModel, EmailStr, Field, StringConstraints
from typing import Optional, Annotated
from datetime import datetime
from uuid import UUID
from .models import OrderStatus

CustomerName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, max_length=20)]
Notes = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]


class OrderCreate(BaseModel):
    customer_name: CustomerName
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[Phone] = None
    product_id: UUID
    quantity: int = Field(..., ge=1)
    notes: Optional[Notes] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[Notes] = None


class ProductSummary(BaseModel):
    name: str
    category: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class ProductDetail(ProductSummary):
    description: Optional[str] = None


class OrderResponse(BaseModel):
    id: str
    retailer_id: str
    product_id: str
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    quantity: int
    unit_price: float
    total_amount: float
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    product: Optional[ProductSummary] = None

    class Config:
        from_attributes = True


class OrderDetailResponse(OrderResponse):
    product: Optional[ProductDetail] = None
