"""Request and response shapes of the pricing endpoint."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bookingflow.schemas.booking_schema import ServiceSelection


class PricingRequest(BaseModel):
    """Quote request as sent by the booking draft screen."""
    model_config = ConfigDict(populate_by_name=True)

    booking_type: Optional[str] = Field(None, alias="bookingType")
    total_hours: Optional[float] = Field(None, alias="totalHours")
    total_days: Optional[int] = Field(None, alias="totalDays")
    services: ServiceSelection = Field(default_factory=ServiceSelection)
    home_size: Optional[str] = Field(None, alias="homeSize")
    selected_dates: list[str] = Field(default_factory=list, alias="selectedDates")


class ServiceCharge(BaseModel):
    """Add-on charge. ``unit`` is ``hour`` or ``day``."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    unit: str
    rate: float
    total_cost: float = Field(alias="totalCost")


class DailyBreakdownEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str
    rate: float
    is_weekend: bool = Field(alias="isWeekend")


class PricingResponse(BaseModel):
    """Itemized quote returned to the booking draft screen."""
    model_config = ConfigDict(populate_by_name=True)

    base_hourly_rate: float = Field(alias="baseHourlyRate")
    services: list[ServiceCharge] = Field(default_factory=list)
    subtotal: float
    service_fee: float = Field(alias="serviceFee")
    emergency_surcharge: Optional[float] = Field(None, alias="emergencySurcharge")
    total: float
    effective_hourly_rate: float = Field(alias="effectiveHourlyRate")
    daily_breakdown: Optional[list[DailyBreakdownEntry]] = Field(None, alias="dailyBreakdown")


class ClassifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    duration_type: Optional[str] = Field(None, alias="durationType")
    booking_sub_type: Optional[str] = Field(None, alias="bookingSubType")
    living_arrangement: Optional[str] = Field(None, alias="livingArrangement")
    home_size: Optional[str] = Field(None, alias="homeSize")
    context_hints: dict[str, str] = Field(default_factory=dict, alias="contextHints")


class ClassifyResponse(BaseModel):
    category: str
    rule: str
