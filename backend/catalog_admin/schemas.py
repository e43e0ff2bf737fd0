"""
Pydantic schemas for request/response validation.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog_admin.static_fields import ComponentType, parse_number


def _price(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_number(value)


class ComponentPayload(BaseModel):
    """Create/update body produced by save-time recomposition."""

    type: Optional[ComponentType] = Field(None, description="Component type (required on create)")
    manufacturer: Optional[str] = Field(None, max_length=255)
    vendor: Optional[str] = Field(None, max_length=255)
    model_name: Optional[str] = Field(None, max_length=500)
    model_number: Optional[str] = Field(None, max_length=255)
    product_page_url: Optional[str] = None
    image_url: Optional[str] = None

    price: Optional[float] = Field(None, description="List price")
    discounted_price: Optional[float] = Field(None, description="Discounted price")
    tracked_price: Optional[float] = Field(None, description="Last scraped price")

    specs: Optional[Dict[str, Any]] = Field(None, description="Opaque specs JSON (extra_specs, legacy dynamic fields)")
    core_custom_data: Optional[Dict[str, Any]] = Field(None, description="Core identity dynamic fields")
    tech_specs: Optional[Dict[str, Any]] = Field(None, description="Technical dynamic fields and static values")
    compat_specs: Optional[Dict[str, Any]] = Field(None, description="Static technical values of the type")

    @field_validator("price", "discounted_price", "tracked_price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Optional[float]:
        """Blank strings become null instead of failing validation."""
        return _price(v)

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "type": "PROCESSOR",
                "manufacturer": "AMD",
                "vendor": "Amazon",
                "model_name": "Ryzen 5 7600",
                "model_number": "100-100001015BOX",
                "product_page_url": "https://example.com/ryzen-5-7600",
                "price": 21999.0,
                "discounted_price": 19999.0,
                "tracked_price": None,
                "specs": {"extra_specs": [{"review": "Runs cool", "source": "https://example.com/review"}]},
                "core_custom_data": {"series": "Ryzen 7000"},
                "tech_specs": {"l3_cache_mb": 32, "socket": "AM5"},
                "compat_specs": {"socket": "AM5"},
            }
        },
    )


class ComponentRecord(BaseModel):
    """Component as returned by the list endpoint."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: ComponentType
    manufacturer: str
    vendor: Optional[str] = None
    model_name: str
    model_number: str
    product_page_url: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[float] = None
    discounted_price: Optional[float] = None
    tracked_price: Optional[float] = None
    specs: Dict[str, Any] = Field(default_factory=dict)
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class PageMeta(BaseModel):
    """Pagination metadata."""

    totalItems: int = 0
    totalPages: int = 0
    currentPage: int = 1


class ComponentPage(BaseModel):
    """One page of components."""

    data: List[ComponentRecord] = Field(default_factory=list)
    meta: PageMeta = Field(default_factory=PageMeta)


class FetchSpecsRequest(BaseModel):
    """Body of the fetch-specs endpoint."""

    url: str = Field(..., min_length=1, description="Product page URL")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Only absolute http(s) URLs are fetched."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v


class ScrapedSpecs(BaseModel):
    """Best-effort attribute guesses scraped from a product page."""

    manufacturer: Optional[str] = None
    model_name: Optional[str] = None
    model_number: Optional[str] = None
    price: Optional[float] = None
    specs: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "manufacturer": "AMD",
                "model_name": "Ryzen 5 7600",
                "model_number": "100-100001015BOX",
                "price": 19999.0,
                "specs": {"Socket": "AM5", "Cores": "6"},
            }
        }
    )


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
