# carcheck/services/report_mapper.py
"""
Report Mapper — adapts each data source into the unified VehicleReport.

DVLA (basic tier) only knows identity, MOT/tax status, CO2 and a couple of
technical fields; everything else is left Absent. Fixture reports are already in
target shape and pass through `identity()`.
"""

from datetime import date
from typing import Optional

from carcheck.config import settings
from carcheck.schemas.government import GovernmentVehiclePayload
from carcheck.schemas.report import (
    Absent,
    Environmental,
    ExtendedSpecs,
    Identity,
    MotAndTax,
    ReportSource,
    VehicleReport,
)
from carcheck.utils.date_parser import is_due_within, parse_date
from carcheck.utils.logger import get_logger

logger = get_logger(__name__)

# Upper bound (g/km, inclusive) → band letter. Anything above 255 is M.
CO2_BANDS = [
    (0, "A"),
    (50, "B"),
    (75, "C"),
    (90, "D"),
    (100, "E"),
    (110, "F"),
    (130, "G"),
    (150, "H"),
    (170, "I"),
    (190, "J"),
    (225, "K"),
    (255, "L"),
]

FUEL_TYPES = {
    "PETROL": "Petrol",
    "DIESEL": "Diesel",
    "ELECTRIC": "Electric",
    "ELECTRICITY": "Electric",
    "HYBRID ELECTRIC": "Hybrid",
    "HYBRID": "Hybrid",
    "GAS": "Gas",
    "LPG": "LPG",
}

WHEEL_PLANS = {
    "2 AXLE RIGID BODY": "2 Axle Rigid Body",
    "2 AXLE RIGID": "2 Axle Rigid",
    "3 AXLE RIGID": "3 Axle Rigid",
    "2-AXLE RIGID BODY": "2 Axle Rigid Body",
    "SINGLE": "Single",
}

# EU type-approval categories: M1 passenger car, N1 light goods, L motorcycles
VEHICLE_TYPES = {
    "M1": "Car",
    "N1": "Van",
    "L3": "Motorcycle",
}

MOT_NOT_VALID = ("Not valid", "No details held by DVLA")


def co2_band(g_per_km: int) -> str:
    for upper, band in CO2_BANDS:
        if g_per_km <= upper:
            return band
    return "M"


def _title(value: Optional[str]) -> Optional[str]:
    return value.capitalize() if value else None


def _identity(payload: GovernmentVehiclePayload, today: date) -> Identity:
    year = payload.year_of_manufacture
    age = today.year - year if year else None
    vehicle_type = VEHICLE_TYPES.get(payload.type_approval or "")
    return Identity(
        make=payload.make,
        model=None,                       # DVLA does not publish the model
        colour=_title(payload.colour),
        body_type=vehicle_type if vehicle_type == "Van" else None,
        fuel_type=FUEL_TYPES.get(payload.fuel_type or "", payload.fuel_type),
        vin=None,
        registration_date=parse_date(payload.month_of_first_registration),
        manufacture_year=year,
        vehicle_age_years=age,
        is_under_three_years_old=age < 3 if age is not None else None,
        vehicle_type=vehicle_type,
        engine_capacity_cc=payload.engine_capacity,
        wheel_plan=WHEEL_PLANS.get(payload.wheelplan or "", payload.wheelplan),
        v5c_issued_date=parse_date(payload.date_of_last_v5c_issued),
        marked_for_export=bool(payload.marked_for_export),
    )


def mot_and_tax(mot_status: Optional[str], mot_due: Optional[date],
                tax_status: Optional[str], tax_due: Optional[date], today: date) -> MotAndTax:
    """MOT/tax section with due flags derived as of `today`. Shared by every source."""
    is_sorn = tax_status == "SORN"
    mot_expired = mot_due is not None and mot_due < today
    tax_expired = tax_due is not None and tax_due < today and not is_sorn
    return MotAndTax(
        mot_status=mot_status,
        mot_due_date=mot_due,
        tax_status=tax_status,
        tax_due_date=tax_due,
        is_mot_due=mot_status in MOT_NOT_VALID or mot_expired,
        is_road_tax_due=tax_status == "Untaxed" or tax_expired,
        is_sorn=is_sorn,
        mot_due_soon=is_due_within(mot_due, today, settings.DUE_SOON_DAYS),
        tax_due_soon=is_due_within(tax_due, today, settings.DUE_SOON_DAYS),
    )


def _mot_and_tax(payload: GovernmentVehiclePayload, today: date) -> MotAndTax:
    return mot_and_tax(
        payload.mot_status,
        parse_date(payload.mot_expiry_date),
        payload.tax_status,
        parse_date(payload.tax_due_date),
        today,
    )


def _environmental(payload: GovernmentVehiclePayload):
    if payload.co2_emissions is None:
        return Absent()
    return Environmental(
        co2_output=payload.co2_emissions,
        co2_band=co2_band(payload.co2_emissions),
    )


def _extended_specs(payload: GovernmentVehiclePayload):
    if not payload.euro_status:
        return Absent()
    return ExtendedSpecs(
        euro_status=payload.euro_status,
        engine_size=f"{payload.engine_capacity} cc" if payload.engine_capacity else None,
        gross_weight_kg=payload.revenue_weight,
        body_style=VEHICLE_TYPES.get(payload.type_approval or ""),
    )


def from_government_payload(payload: GovernmentVehiclePayload, today: Optional[date] = None) -> VehicleReport:
    """Map a DVLA VES response into a basic-tier VehicleReport."""
    today = today or date.today()
    identity_section = _identity(payload, today)

    report = VehicleReport(
        vrm=payload.registration_number.replace(" ", "").upper(),
        source=ReportSource.DVLA,
        identity=identity_section,
        mot_and_tax=_mot_and_tax(payload, today),
        environmental=_environmental(payload),
        extended_specs=_extended_specs(payload),
        mot_history=Absent(),
        keeper_history=Absent(),
        valuation=Absent(),
    )
    logger.debug(f"[MAPPER] DVLA payload mapped for {report.vrm}")
    return report


def identity(report: VehicleReport) -> VehicleReport:
    """Fixture reports are already in target shape."""
    return report
