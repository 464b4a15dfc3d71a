from pydantic import BaseModel, Field, HttpUrl, StringConstraints, field_validator
from typing import Optional, Annotated
from datetime import datetime

ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)]
Category = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]


class ProductBase(BaseModel):
    description: Optional[Description] = None
    category: Optional[Category] = None
    image_url: Optional[HttpUrl] = None

    def to_columns(self, exclude_unset: bool = False) -> dict:
        data = self.model_dump(exclude_unset=exclude_unset)
        if data.get("image_url") is not None:
            data["image_url"] = str(data["image_url"])
        return data


class ProductCreate(ProductBase):
    name: ProductName
    price: float = Field(..., ge=0, allow_inf_nan=False)
    stock: int = Field(0, ge=0)

    @field_validator("price")
    @classmethod
    def round_price(cls, v):
        # Prices are stored with cent precision
        return round(v, 2)


class ProductUpdate(ProductBase):
    name: Optional[ProductName] = None
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("name", "price", "stock", "is_active")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("price")
    @classmethod
    def round_price(cls, v):
        return round(v, 2) if v is not None else v


class ProductResponse(BaseModel):
    id: str
    retailer_id: str
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
