# carcheck/schemas/government.py
"""
DVLA Vehicle Enquiry Service payloads.
Field names follow the DVLA JSON (camelCase) through aliases.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class GovernmentVehiclePayload(BaseModel):
    registration_number: str = Field(alias="registrationNumber")
    tax_status: Optional[str] = Field(default=None, alias="taxStatus")
    tax_due_date: Optional[str] = Field(default=None, alias="taxDueDate")
    mot_status: Optional[str] = Field(default=None, alias="motStatus")
    mot_expiry_date: Optional[str] = Field(default=None, alias="motExpiryDate")
    make: Optional[str] = None
    year_of_manufacture: Optional[int] = Field(default=None, alias="yearOfManufacture")
    engine_capacity: Optional[int] = Field(default=None, alias="engineCapacity")
    co2_emissions: Optional[int] = Field(default=None, alias="co2Emissions")
    fuel_type: Optional[str] = Field(default=None, alias="fuelType")
    marked_for_export: Optional[bool] = Field(default=None, alias="markedForExport")
    colour: Optional[str] = None
    type_approval: Optional[str] = Field(default=None, alias="typeApproval")
    revenue_weight: Optional[int] = Field(default=None, alias="revenueWeight")
    date_of_last_v5c_issued: Optional[str] = Field(default=None, alias="dateOfLastV5CIssued")
    wheelplan: Optional[str] = None
    month_of_first_registration: Optional[str] = Field(default=None, alias="monthOfFirstRegistration")
    euro_status: Optional[str] = Field(default=None, alias="euroStatus")

    class Config:
        populate_by_name = True
        extra = "ignore"


class VehicleEnquiry(BaseModel):
    registrationNumber: Optional[str] = None


class ProxyResponse(BaseModel):
    """Envelope returned by POST /vehicle, mirroring the DVLA proxy contract."""
    success: bool
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    statusCode: Optional[int] = None
