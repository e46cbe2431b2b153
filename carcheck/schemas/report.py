# carcheck/schemas/report.py
"""
Unified VehicleReport — the single shape every consumer reads, whether the
data came from the DVLA API (basic tier) or the fixture store (silver/gold).

Optional sections are tagged unions of the section model and Absent, keyed
on `status`. "No data" is always an Absent marker, never a zeroed section.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class ReportSource(str, Enum):
    DVLA = "dvla"
    FIXTURE = "fixture"


class _Frozen(BaseModel):
    class Config:
        frozen = True


class Absent(_Frozen):
    status: Literal["absent"] = "absent"
    reason: str = "not_in_source"


class _Section(_Frozen):
    status: Literal["present"] = "present"


# ── Always present ────────────────────────────────────────────────────────

class Identity(_Frozen):
    make: Optional[str] = None
    model: Optional[str] = None
    colour: Optional[str] = None
    body_type: Optional[str] = None
    fuel_type: Optional[str] = None
    vin: Optional[str] = None
    registration_date: Optional[date] = None
    manufacture_year: Optional[int] = None
    vehicle_age_years: Optional[int] = None       # derived at mapping time
    is_under_three_years_old: Optional[bool] = None
    vehicle_type: Optional[str] = None
    engine_capacity_cc: Optional[int] = None
    wheel_plan: Optional[str] = None
    v5c_issued_date: Optional[date] = None
    marked_for_export: bool = False


class MotAndTax(_Frozen):
    mot_status: Optional[str] = None
    mot_due_date: Optional[date] = None
    tax_status: Optional[str] = None
    tax_due_date: Optional[date] = None
    is_mot_due: bool = False
    is_road_tax_due: bool = False
    is_sorn: bool = False
    mot_due_soon: bool = False
    tax_due_soon: bool = False


# ── MOT history ───────────────────────────────────────────────────────────

class MotDefect(_Frozen):
    text: str
    type: str = "ADVISORY"      # ADVISORY | MINOR | MAJOR | DANGEROUS | FAIL
    is_dangerous: bool = False


class MotTest(_Frozen):
    test_date: date
    passed: bool
    odometer_reading: Optional[int] = None
    odometer_unit: Optional[str] = None
    advisories: list[MotDefect] = Field(default_factory=list)
    failures: list[MotDefect] = Field(default_factory=list)
    has_dangerous_defects: bool = False
    expiry_date: Optional[date] = None
    test_number: Optional[str] = None
    mileage_difference: Optional[int] = None


class MotHistory(_Section):
    tests: list[MotTest]                          # newest first
    current_mileage: Optional[int] = None
    average_mileage_per_year: Optional[int] = None


# ── Environmental ─────────────────────────────────────────────────────────

class FuelEconomy(_Frozen):
    urban_mpg: Optional[float] = None
    extra_urban_mpg: Optional[float] = None
    combined_mpg: Optional[float] = None
    annual_fuel_cost: Optional[int] = None        # GBP, 12,000 miles


class Environmental(_Section):
    co2_output: int                               # g/km; 0 is a real value
    co2_band: str
    fuel_economy: Optional[FuelEconomy] = None


# ── Extended specifications ───────────────────────────────────────────────

class ExtendedSpecs(_Section):
    euro_status: Optional[str] = None
    engine_size: Optional[str] = None
    engine_code: Optional[str] = None
    bhp: Optional[int] = None
    power_kw: Optional[int] = None
    fuel_delivery: Optional[str] = None
    cylinders: Optional[int] = None
    transmission: Optional[str] = None
    gears: Optional[int] = None
    drive_type: Optional[str] = None
    doors: Optional[int] = None
    seats: Optional[int] = None
    body_style: Optional[str] = None
    length_mm: Optional[int] = None
    width_mm: Optional[int] = None
    height_mm: Optional[int] = None
    wheelbase_mm: Optional[int] = None
    gross_weight_kg: Optional[int] = None
    insurance_group: Optional[str] = None
    top_speed_mph: Optional[int] = None
    acceleration_0_60_secs: Optional[float] = None


# ── Gold-only sections ────────────────────────────────────────────────────

class KeeperPeriod(_Frozen):
    keeper_number: int
    acquired: date
    disposed: Optional[date] = None
    duration_days: int
    duration_description: str
    is_latest: bool = False


class KeeperHistory(_Section):
    keepers: list[KeeperPeriod]                   # oldest first
    previous_keeper_count: int


class PriceBand(_Frozen):
    average: int
    good: int
    excellent: int


class Valuation(_Section):
    trade: PriceBand
    private: PriceBand
    retail: int
    mileage: Optional[int] = None
    plate_year: Optional[str] = None
    description: Optional[str] = None


MotHistorySection = Annotated[Union[MotHistory, Absent], Field(discriminator="status")]
EnvironmentalSection = Annotated[Union[Environmental, Absent], Field(discriminator="status")]
ExtendedSpecsSection = Annotated[Union[ExtendedSpecs, Absent], Field(discriminator="status")]
KeeperHistorySection = Annotated[Union[KeeperHistory, Absent], Field(discriminator="status")]
ValuationSection = Annotated[Union[Valuation, Absent], Field(discriminator="status")]


class VehicleReport(_Frozen):
    vrm: str
    source: ReportSource
    identity: Identity
    mot_and_tax: MotAndTax
    mot_history: MotHistorySection = Absent()
    environmental: EnvironmentalSection = Absent()
    extended_specs: ExtendedSpecsSection = Absent()
    keeper_history: KeeperHistorySection = Absent()
    valuation: ValuationSection = Absent()


def is_present(section) -> bool:
    return section is not None and not isinstance(section, Absent)
