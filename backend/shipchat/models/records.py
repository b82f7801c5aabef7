"""
Shipment record models.

Bounds live on the models themselves so the validator and the session store
agree on what a well-formed value is.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Any

from pydantic import BaseModel, Field

from shipchat.models.enums import (
    PackageType,
    PriorityLevel,
    DimensionUnit,
    WeightUnit,
    RecordField,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Dimensions(BaseModel):
    length: float = Field(..., gt=0, le=10000)
    width: float = Field(..., gt=0, le=10000)
    height: float = Field(..., gt=0, le=10000)
    unit: DimensionUnit

    def volume(self) -> float:
        return self.length * self.width * self.height

    def volume_cubic_meters(self) -> float:
        factor = {
            DimensionUnit.CM: 0.01,
            DimensionUnit.INCH: 0.0254,
            DimensionUnit.M: 1.0,
        }[self.unit]
        return self.volume() * factor ** 3


class Weight(BaseModel):
    value: float = Field(..., gt=0, le=100000)
    unit: WeightUnit

    def in_kg(self) -> float:
        factor = {
            WeightUnit.KG: 1.0,
            WeightUnit.LBS: 0.453592,
            WeightUnit.G: 0.001,
            WeightUnit.OZ: 0.0283495,
        }[self.unit]
        return self.value * factor


class Address(BaseModel):
    street: str = Field(..., min_length=3, max_length=200)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=100)
    postal_code: str = Field(..., min_length=3, max_length=20)
    country: str = Field(..., min_length=2, max_length=100)
    additional_info: Optional[str] = Field(None, max_length=200)

    def short(self) -> str:
        return f"{self.city}, {self.state}, {self.country}"


class SenderInfo(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: Optional[str] = Field(None, pattern=r"^[\w.+-]+@[\w-]+(\.[\w-]+)+$")
    phone: Optional[str] = Field(None, pattern=r"^[\d\s()+-]+$", min_length=10, max_length=20)


class MonetaryValue(BaseModel):
    amount: float = Field(..., ge=0, le=1000000)
    currency: str = Field("USD", min_length=3, max_length=3)


class TrackingPreferences(BaseModel):
    email_notifications: bool = False
    sms_notifications: bool = False
    signature_required: bool = False

    def describe(self) -> str:
        chosen = []
        if self.email_notifications:
            chosen.append("email")
        if self.sms_notifications:
            chosen.append("SMS")
        if self.signature_required:
            chosen.append("signature required")
        return ", ".join(chosen) if chosen else "none"


# Fields a record cannot be committed without, in collection order.
REQUIRED_FIELDS: List[RecordField] = [
    RecordField.PACKAGE_TYPE,
    RecordField.DIMENSIONS,
    RecordField.WEIGHT,
    RecordField.IS_FRAGILE,
    RecordField.PRIORITY,
    RecordField.DESTINATION,
]


class InProgressRecord(BaseModel):
    """
    Shipment record being filled in. A field is present exactly when it is
    not None; there are no placeholder defaults.
    """
    id: str = Field(default_factory=_new_id)
    package_type: Optional[PackageType] = None
    dimensions: Optional[Dimensions] = None
    weight: Optional[Weight] = None
    is_fragile: Optional[bool] = None
    priority: Optional[PriorityLevel] = None
    destination: Optional[Address] = None
    sender: Optional[SenderInfo] = None
    special_instructions: Optional[str] = None
    estimated_value: Optional[MonetaryValue] = None
    insurance_required: Optional[bool] = None
    tracking_preferences: Optional[TrackingPreferences] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def get_field(self, field: RecordField) -> Any:
        return getattr(self, field.value)

    def has_field(self, field: RecordField) -> bool:
        return self.get_field(field) is not None

    def missing_required_fields(self) -> List[RecordField]:
        return [f for f in REQUIRED_FIELDS if not self.has_field(f)]

    def is_complete(self) -> bool:
        return not self.missing_required_fields()

    def to_shipment(self) -> "ShipmentRecord":
        data = self.model_dump()
        if data["insurance_required"] is None:
            data["insurance_required"] = False
        data["updated_at"] = _now()
        return ShipmentRecord.model_validate(data)


class ShipmentRecord(BaseModel):
    """A committed shipment record."""
    id: str
    package_type: PackageType
    dimensions: Dimensions
    weight: Weight
    is_fragile: bool
    priority: PriorityLevel
    destination: Address
    sender: Optional[SenderInfo] = None
    special_instructions: Optional[str] = Field(None, max_length=500)
    estimated_value: Optional[MonetaryValue] = None
    insurance_required: bool = False
    tracking_preferences: Optional[TrackingPreferences] = None
    created_at: datetime
    updated_at: datetime

    def get_field(self, field: RecordField) -> Any:
        return getattr(self, field.value)
