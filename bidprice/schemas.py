# bidprice/schemas.py
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, List, Optional
from datetime import datetime

class ListingBase(BaseModel):
    import_date: str = Field(..., max_length=10)
    import_time: str
    listing_id: str = Field(..., min_length=1, max_length=255)
    brand: str = ""
    model: str = ""
    variant: str = ""
    year: int = 0
    price: float = 0
    mileage: int = 0
    location: str = ""
    bid: float = 0
    bidder: int = 0
    has_bid: bool = False

class ListingRecord(ListingBase):
    """One normalized listing as produced by the import parser.

    A zero ``year``, ``price`` or ``mileage`` means the source cell was missing
    or unreadable, not a genuine zero.
    """
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def derive_bid_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("price", "mileage", "bid"):
            if (data.get(key) or 0) < 0:
                data[key] = 0
        bid = data.get("bid") or 0
        data["has_bid"] = bid > 0
        if not data["has_bid"]:
            data["bidder"] = 0
        return data

class ListingUpdate(BaseModel):
    brand: Optional[str] = None
    model: Optional[str] = None
    variant: Optional[str] = None
    year: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    mileage: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    bid: Optional[float] = Field(None, ge=0)
    bidder: Optional[int] = Field(None, ge=0)

class ListingOut(ListingBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None

class ListingPage(BaseModel):
    total: int
    items: List[ListingOut]

class ListingFilter(BaseModel):
    brand: Optional[str] = None
    model: Optional[str] = None
    import_date: Optional[str] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    has_bid: Optional[bool] = None

class FilterOptions(BaseModel):
    brands: List[str] = Field(default_factory=list)
    models: List[str] = Field(default_factory=list)
    import_dates: List[str] = Field(default_factory=list)

class ImportResult(BaseModel):
    file_name: Optional[str] = None
    found: int = 0
    inserted: int = 0
    skipped: int = 0
    batches: int = 0
    error: Optional[str] = None
    message: str = ""
