"""
Vehicle, driver and client Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List
from freight_ledger.app.schemas.shipment import reject_null


class VehicleCreate(BaseModel):
    """Schema for registering a vehicle."""
    name: str = Field(..., min_length=1, max_length=100)
    brand: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    color: str = Field(..., min_length=1, max_length=50)
    plate: str = Field(..., min_length=1, max_length=20, description="Unique license plate")


class VehicleUpdate(BaseModel):
    """Schema for updating an existing vehicle."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    brand: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, min_length=1, max_length=50)
    plate: Optional[str] = Field(None, min_length=1, max_length=20)

    @field_validator("name", "brand", "model", "color", "plate")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    name: str
    brand: str
    model: str
    color: str
    plate: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehicleListResponse(BaseModel):
    """Schema for paginated vehicle list."""
    vehicles: List[VehicleResponse]
    total: int
    page: int
    page_size: int


class DriverCreate(BaseModel):
    """Schema for registering a driver."""
    cedula: str = Field(..., min_length=1, max_length=20)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    vehicle_id: Optional[int] = None


class DriverResponse(BaseModel):
    """Schema for driver response."""
    id: int
    cedula: str
    first_name: str
    last_name: str
    vehicle_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ClientCreate(BaseModel):
    """Schema for registering a client."""
    nombre: str = Field(..., min_length=1, max_length=150)


class ClientResponse(BaseModel):
    """Schema for client response."""
    id: int
    nombre: str
    created_at: datetime

    class Config:
        from_attributes = True
