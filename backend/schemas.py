# schemas.py
"""
Defines the Pydantic models for data validation and serialization.
These models define the shape of the data for API requests and responses.
"""
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional, Tuple
import datetime


class PropertyDescription(BaseModel):
    """The caller-supplied description of a property to estimate."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    # Required
    property_type: str
    bedrooms: int = Field(..., ge=0)
    bathrooms: float = Field(..., ge=0)
    # The web form posts the size as "area"
    area_sqft: int = Field(..., gt=0, validation_alias=AliasChoices("areaSqft", "area_sqft", "area"))
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)

    # Optional
    zipcode: Optional[str] = None
    address: Optional[str] = None
    year_built: Optional[int] = Field(None, ge=1000, le=3000)
    parking_spaces: Optional[int] = Field(None, ge=0)
    furnished: bool = False
    pet_friendly: bool = False
    amenities: Tuple[str, ...] = ()

    @field_validator("zipcode", "address", "year_built", "parking_spaces", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("property_type")
    @classmethod
    def normalise_type(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("city", "state")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("bathrooms")
    @classmethod
    def half_steps_only(cls, v: float) -> float:
        if not float(v * 2).is_integer():
            raise ValueError("bathrooms must be a whole or half number (e.g. 1.5)")
        return v

    @field_validator("amenities", mode="before")
    @classmethod
    def amenity_set(cls, v):
        # Amenities are a set: drop blanks/duplicates and fix the order.
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        return tuple(sorted({str(a).strip() for a in v if str(a).strip()}))


class PriceRange(BaseModel):
    min: float
    max: float


class FactorScores(BaseModel):
    """Per-factor contribution scores, each on a 0-100 scale."""
    location: float
    size: float
    bedrooms: float
    bathrooms: float
    amenities: float
    market: float


class ComparableProperty(BaseModel):
    price: float = Field(..., gt=0)
    distance: str
    similarity: float = Field(..., ge=0, le=100)


class PriceEstimate(BaseModel):
    """Final estimate returned to the caller, serialised with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    estimated_price: float = Field(..., gt=0)
    price_range: PriceRange
    confidence: float = Field(..., ge=0, le=100)
    factors: FactorScores
    comparable_properties: List[ComparableProperty] = Field(..., min_length=3, max_length=3)


class ModelEstimateOutput(BaseModel):
    """Schema to validate the structured JSON output from the LLM."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    estimated_price: float = Field(..., gt=0)
    price_range: PriceRange
    factors: FactorScores
    confidence: Optional[float] = None
    # Validated entry by entry while shaping; bad entries are dropped.
    comparable_properties: List[Any] = []


class PredictionResponse(BaseModel):
    prediction: PriceEstimate


# --- Listings ---

class PropertyOut(BaseModel):
    """A stored listing as served to the client."""
    id: str
    title: str
    description: Optional[str] = None
    property_type: str
    price: float
    area_sqft: int
    bedrooms: int
    bathrooms: float
    address: str
    city: str
    state: str
    zipcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    images: List[str] = []
    amenities: List[str] = []
    status: str
    agent_name: Optional[str] = None
    agent_contact: Optional[str] = None
    year_built: Optional[int] = None
    parking_spaces: Optional[int] = 0
    furnished: bool = False
    pet_friendly: bool = False
    created_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FavoriteOut(BaseModel):
    property_id: str
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyViewOut(BaseModel):
    id: str
    property_id: str
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    viewed_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    error: str
    message: str
    fields: List[str] = []
