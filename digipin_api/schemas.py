from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    # Accept both the camelCase wire names and snake_case
    model_config = ConfigDict(populate_by_name=True)


# --- Request Models ---

class EncodeRequest(_CamelModel):
    latitude: float = Field(..., allow_inf_nan=False, description="Latitude in decimal degrees.")
    longitude: float = Field(..., allow_inf_nan=False, description="Longitude in decimal degrees.")
    country_code: Optional[str] = Field(None, alias="countryCode", description="Region identifier, e.g. IN.")


class DecodeRequest(_CamelModel):
    digipin: str = Field(..., description="DIGIPIN, hyphens optional.")
    country_code: Optional[str] = Field(None, alias="countryCode", description="Region identifier, e.g. IN.")


# --- Response Models ---

class EncodeResponse(BaseModel):
    digipin: str


class DecodeResponse(BaseModel):
    latitude: str = Field(..., description="Cell centre latitude, 6 decimal places.")
    longitude: str = Field(..., description="Cell centre longitude, 6 decimal places.")


class RegionInfo(BaseModel):
    countryCode: str
    levels: int
    minLat: float
    maxLat: float
    minLon: float
    maxLon: float


class RegionsResponse(BaseModel):
    regions: List[RegionInfo]


class ErrorResponse(BaseModel):
    """Body of every 400 response."""
    error: str = Field(..., description="A human-readable explanation.")
    error_code: str = Field(..., description="A machine-readable error code.")
    context: Dict[str, Any] = Field(default_factory=dict)
