"""Service and provider references carried by a booking draft."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ServiceRef(BaseModel):
    """Service being booked."""

    id: int = Field(..., description="Numeric service ID")
    name: str
    price: float = Field(..., ge=0, description="Base price in dollars")
    duration_minutes: int = Field(default=60, ge=5, le=600)
    description: Optional[str] = None

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 12,
                "name": "Silk Press",
                "price": 80.0,
                "duration_minutes": 90,
            }
        },
    )


class ProviderRef(BaseModel):
    """Provider offering the service."""

    id: str = Field(..., description="Provider ID")
    business_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def display_name(self) -> str:
        """Business name, falling back to the provider's full name."""
        if self.business_name:
            return self.business_name
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or "your provider"
