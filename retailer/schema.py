from pydantic import BaseModel, EmailStr, HttpUrl, StringConstraints, field_validator
from typing import Optional, Annotated, Literal, List, Dict, Any
from datetime import datetime

Theme = Literal["default", "modern", "classic", "minimal", "bold"]

BusinessName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=255)]
Color = Annotated[str, StringConstraints(strip_whitespace=True, max_length=20)]
ShortText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]


class RetailerRegistration(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
    email: EmailStr


class RetailerSettingsUpdate(BaseModel):
    name: Optional[BusinessName] = None
    logo_url: Optional[HttpUrl] = None
    banner_url: Optional[HttpUrl] = None
    primary_color: Optional[Color] = None
    secondary_color: Optional[Color] = None
    font: Optional[ShortText] = None
    nav_menu: Optional[List[Any]] = None
    layout_preference: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]] = None
    contact_info: Optional[Dict[str, Any]] = None
    social_links: Optional[Dict[str, Any]] = None
    footer_text: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)]] = None
    theme: Optional[Theme] = None

    @field_validator("name", "theme")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    def to_columns(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        for key in ("logo_url", "banner_url"):
            if data.get(key) is not None:
                data[key] = str(data[key])
        return data


class ThemeUpdate(BaseModel):
    theme: Theme


class RetailerResponse(BaseModel):
    id: str
    user_id: str
    name: str
    email: str
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    font: Optional[str] = None
    nav_menu: Optional[List[Any]] = None
    layout_preference: Optional[str] = None
    contact_info: Optional[Dict[str, Any]] = None
    social_links: Optional[Dict[str, Any]] = None
    footer_text: Optional[str] = None
    theme: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PublicStoreInfo(BaseModel):
    """Branding that is safe to show to shoppers"""
    id: str
    name: str
    logo_url: Optional[str] = None
    theme: str
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    font: Optional[str] = None
    banner_url: Optional[str] = None
    nav_menu: Optional[List[Any]] = None
    layout_preference: Optional[str] = None
    contact_info: Optional[Dict[str, Any]] = None
    social_links: Optional[Dict[str, Any]] = None
    footer_text: Optional[str] = None

    class Config:
        from_attributes = True


class PublicProduct(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True
