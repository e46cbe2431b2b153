# carcheck/services/fixture_store.py
"""
Fixture Data Store — canned silver/gold reports for the one demo vehicle.

Stands in for a paid data provider. Silver is the gold report with the
gold-only sections (keeper history, valuation) replaced by Absent markers,
so switching tier on the same VRM never changes identity or MOT data.
"""

from datetime import date
from typing import Optional

from carcheck.config import settings
from carcheck.schemas.report import (
    Absent,
    Environmental,
    ExtendedSpecs,
    FuelEconomy,
    Identity,
    KeeperHistory,
    KeeperPeriod,
    MotDefect,
    MotHistory,
    MotTest,
    PriceBand,
    ReportSource,
    Valuation,
    VehicleReport,
)
from carcheck.schemas.tier import SubscriptionTier
from carcheck.services.exceptions import VehicleNotFoundError
from carcheck.services.registration import Registration
from carcheck.services.report_mapper import mot_and_tax
from carcheck.utils.date_parser import describe_duration
from carcheck.utils.logger import get_logger

logger = get_logger(__name__)

MOT_DUE = date(2026, 9, 6)
TAX_DUE = date(2025, 12, 1)

# What the DVLA VES API returns for the demo vehicle (offline demo mode)
DEMO_DVLA_PAYLOAD = {
    "registrationNumber": "WA67YSB",
    "taxStatus": "Taxed",
    "taxDueDate": TAX_DUE.isoformat(),
    "motStatus": "Valid",
    "make": "SKODA",
    "yearOfManufacture": 2017,
    "engineCapacity": 1395,
    "co2Emissions": 117,
    "fuelType": "PETROL",
    "markedForExport": False,
    "colour": "GREY",
    "typeApproval": "M1",
    "revenueWeight": 1861,
    "dateOfLastV5CIssued": "2020-12-06",
    "motExpiryDate": MOT_DUE.isoformat(),
    "wheelplan": "2 AXLE RIGID BODY",
    "monthOfFirstRegistration": "2017-09",
    "euroStatus": "6b",
}

# DVLA UAT test registrations and the response each one triggers
TEST_VRNS = {
    "VALID": "TE57VRN",
    "BAD_REQUEST": "ER19BAD",    # 400
    "NOT_FOUND": "ER19NF",       # 404
    "SERVER_ERROR": "ER19ISE",   # 500
    "UNAVAILABLE": "ER19SU",     # 503
}


def _advisory(text: str) -> MotDefect:
    return MotDefect(text=text, type="ADVISORY", is_dangerous=False)


def _mot_test(test_date, reading, expiry, number, difference, advisories=()) -> MotTest:
    return MotTest(
        test_date=test_date,
        passed=True,
        odometer_reading=reading,
        odometer_unit="miles",
        advisories=[_advisory(a) for a in advisories],
        failures=[],
        has_dangerous_defects=False,
        expiry_date=expiry,
        test_number=number,
        mileage_difference=difference,
    )


def _mileage_per_year(tests: list[MotTest]) -> Optional[int]:
    """Average annual mileage between the oldest and newest readings."""
    readings = [t for t in tests if t.odometer_reading is not None]
    if len(readings) < 2:
        return None
    newest, oldest = readings[0], readings[-1]
    years = (newest.test_date - oldest.test_date).days / 365
    if years <= 0:
        return None
    return round((newest.odometer_reading - oldest.odometer_reading) / years)


def _keeper(number: int, acquired: date, disposed: Optional[date], as_of: date, is_latest=False) -> KeeperPeriod:
    end = disposed or as_of
    return KeeperPeriod(
        keeper_number=number,
        acquired=acquired,
        disposed=disposed,
        duration_days=(end - acquired).days,
        duration_description=describe_duration(acquired, end),
        is_latest=is_latest,
    )


def build_gold_report(vrm: str, as_of: Optional[date] = None) -> VehicleReport:
    """Full gold-tier report for the demo Skoda Octavia estate."""
    as_of = as_of or date.today()

    tests = [
        _mot_test(date(2025, 8, 20), 50382, MOT_DUE, "285981326299", 10862, [
            "Front brake disc worn, but not excessively both (1.1.14 (a) (i))",
            "Front lower suspension arm pin or bush worn but not resulting in excessive movement rear (both) (5.3.4 (a) (i))",
        ]),
        _mot_test(date(2024, 8, 28), 39520, date(2025, 9, 6), "233511524101", 9803, [
            "Front brake disc worn, but not excessively (1.1.14 (a) (i))",
            "Offside rear tyre slightly damaged/cracking or perishing (5.2.3 (d) (ii))",
        ]),
        _mot_test(date(2023, 8, 30), 29717, date(2024, 9, 6), "158094699087", 8583),
        _mot_test(date(2022, 8, 31), 21134, date(2023, 9, 6), "869422867363", 8735),
        _mot_test(date(2021, 8, 31), 12399, date(2022, 9, 6), "932798299992", 6382),
        _mot_test(date(2020, 8, 14), 6017, date(2021, 9, 6), "157349050770", 0),
    ]

    return VehicleReport(
        vrm=vrm,
        source=ReportSource.FIXTURE,
        identity=Identity(
            make="Skoda",
            model="Octavia SE L TSI S-A",
            colour="Grey",
            body_type="Estate",
            fuel_type="Petrol",
            vin="TMBKC7NE5J0122285",
            registration_date=date(2017, 9, 7),
            manufacture_year=2017,
            vehicle_age_years=as_of.year - 2017,
            is_under_three_years_old=False,
            vehicle_type="Car",
            engine_capacity_cc=1395,
            wheel_plan="2 Axle Rigid Body",
            v5c_issued_date=date(2020, 12, 6),
            marked_for_export=False,
        ),
        mot_and_tax=mot_and_tax(
            "Valid" if MOT_DUE >= as_of else "Not valid",
            MOT_DUE,
            "Taxed" if TAX_DUE >= as_of else "Untaxed",
            TAX_DUE,
            as_of,
        ),
        mot_history=MotHistory(
            tests=tests,
            current_mileage=tests[0].odometer_reading,
            average_mileage_per_year=_mileage_per_year(tests),
        ),
        environmental=Environmental(
            co2_output=117,
            co2_band="G",
            fuel_economy=FuelEconomy(
                urban_mpg=45.6,
                extra_urban_mpg=64.2,
                combined_mpg=55.4,
                annual_fuel_cost=1615,
            ),
        ),
        extended_specs=ExtendedSpecs(
            euro_status="6b",
            engine_size="1.4 litres",
            engine_code="CZDA",
            bhp=147,
            power_kw=110,
            fuel_delivery="Turbo Injection",
            cylinders=4,
            transmission="Semi Automatic",
            gears=7,
            drive_type="Front Wheel Drive",
            doors=5,
            seats=5,
            body_style="Estate",
            length_mm=4667,
            width_mm=None,
            height_mm=1495,
            wheelbase_mm=2686,
            gross_weight_kg=1861,
            insurance_group="18E",
            top_speed_mph=134,
            acceleration_0_60_secs=8.3,
        ),
        keeper_history=KeeperHistory(
            keepers=[
                _keeper(1, date(2017, 9, 7), date(2020, 10, 19), as_of),
                _keeper(2, date(2020, 12, 6), None, as_of, is_latest=True),
            ],
            previous_keeper_count=1,
        ),
        valuation=Valuation(
            trade=PriceBand(average=8500, good=9200, excellent=9800),
            private=PriceBand(average=9800, good=10500, excellent=11200),
            retail=11800,
            mileage=50382,
            plate_year="67",
            description="Skoda Octavia Estate 1.4 TSI 150 SE L",
        ),
    )


def silver_projection(gold: VehicleReport) -> VehicleReport:
    """Gold report with the gold-only sections explicitly marked Absent."""
    return gold.model_copy(update={
        "keeper_history": Absent(reason="not_in_tier"),
        "valuation": Absent(reason="not_in_tier"),
    })


class FixtureStore:
    """Serves the canned reports for the configured demo registration."""

    def __init__(self, demo_vrm: Optional[str] = None, as_of: Optional[date] = None):
        self.demo_vrm = Registration.parse(demo_vrm or settings.DEMO_VRM)
        self._as_of = as_of

    def get_fixture(self, vrm: Registration, tier: SubscriptionTier) -> VehicleReport:
        if tier == SubscriptionTier.BASIC:
            raise ValueError("basic tier is served by the DVLA source, not fixtures")
        if vrm != self.demo_vrm:
            logger.info(f"[FIXTURE] No fixture for {vrm}")
            raise VehicleNotFoundError(f"Vehicle {vrm} not found", status_code=404)

        gold = build_gold_report(vrm.value, self._as_of)
        if tier == SubscriptionTier.GOLD:
            return gold
        return silver_projection(gold)
