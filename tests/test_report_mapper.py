# tests/test_report_mapper.py
"""Unit tests for DVLA → VehicleReport mapping and the date helpers it uses."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date
from carcheck.schemas.government import GovernmentVehiclePayload
from carcheck.schemas.report import Absent, ReportSource, is_present
from carcheck.services.fixture_store import DEMO_DVLA_PAYLOAD
from carcheck.services.report_mapper import co2_band, from_government_payload
from carcheck.utils.date_parser import describe_duration, is_due_within, parse_date

TODAY = date(2025, 11, 15)


def make_payload(**overrides):
    return GovernmentVehiclePayload.model_validate({**DEMO_DVLA_PAYLOAD, **overrides})


class TestCo2Band:
    @pytest.mark.parametrize("value,band", [
        (-3, "A"), (0, "A"), (1, "B"), (50, "B"), (51, "C"), (75, "C"), (90, "D"),
        (100, "E"), (101, "F"), (110, "F"), (117, "G"), (130, "G"), (150, "H"),
        (170, "I"), (190, "J"), (225, "K"), (255, "L"), (256, "M"), (400, "M"),
    ])
    def test_band_boundaries(self, value, band):
        assert co2_band(value) == band


class TestFromGovernmentPayload:
    def test_demo_payload(self):
        report = from_government_payload(make_payload(), TODAY)

        assert report.vrm == "WA67YSB"
        assert report.source == ReportSource.DVLA
        assert report.identity.make == "SKODA"
        assert report.identity.colour == "Grey"
        assert report.identity.fuel_type == "Petrol"
        assert report.identity.vehicle_type == "Car"
        assert report.identity.wheel_plan == "2 Axle Rigid Body"
        assert report.identity.registration_date == date(2017, 9, 1)
        assert report.identity.v5c_issued_date == date(2020, 12, 6)
        assert report.identity.vehicle_age_years == 8
        assert report.identity.is_under_three_years_old is False
        assert report.identity.engine_capacity_cc == 1395

    def test_fields_dvla_does_not_publish_stay_empty(self):
        report = from_government_payload(make_payload(), TODAY)
        assert report.identity.model is None
        assert report.identity.vin is None
        assert report.identity.body_type is None

    def test_history_sections_absent(self):
        report = from_government_payload(make_payload(), TODAY)
        for section in (report.mot_history, report.keeper_history, report.valuation):
            assert isinstance(section, Absent)
            assert section.reason == "not_in_source"

    def test_environmental_from_co2(self):
        report = from_government_payload(make_payload(), TODAY)
        assert report.environmental.co2_output == 117
        assert report.environmental.co2_band == "G"

    def test_missing_co2_is_absent_not_zero(self):
        report = from_government_payload(make_payload(co2Emissions=None), TODAY)
        assert not is_present(report.environmental)

    def test_zero_co2_is_present_band_a(self):
        report = from_government_payload(make_payload(co2Emissions=0), TODAY)
        assert is_present(report.environmental)
        assert report.environmental.co2_output == 0
        assert report.environmental.co2_band == "A"

    def test_expired_dates_flag_due_regardless_of_status(self):
        report = from_government_payload(make_payload(), date(2026, 10, 19))
        assert report.mot_and_tax.is_mot_due is True
        assert report.mot_and_tax.is_road_tax_due is True

    def test_sorn_vehicle_not_flagged_for_tax(self):
        report = from_government_payload(make_payload(taxStatus="SORN"), date(2026, 10, 19))
        assert report.mot_and_tax.is_road_tax_due is False

    def test_extended_specs_need_euro_status(self):
        present = from_government_payload(make_payload(), TODAY)
        assert present.extended_specs.euro_status == "6b"
        assert present.extended_specs.gross_weight_kg == 1861

        absent = from_government_payload(make_payload(euroStatus=None), TODAY)
        assert isinstance(absent.extended_specs, Absent)

    def test_mot_and_tax_flags(self):
        report = from_government_payload(make_payload(), TODAY)
        assert report.mot_and_tax.mot_due_date == date(2026, 9, 6)
        assert report.mot_and_tax.is_mot_due is False
        assert report.mot_and_tax.mot_due_soon is False
        assert report.mot_and_tax.tax_due_soon is True   # 16 days out

    def test_sorn_and_untaxed(self):
        sorn = from_government_payload(make_payload(taxStatus="SORN"), TODAY)
        assert sorn.mot_and_tax.is_sorn is True

        untaxed = from_government_payload(make_payload(taxStatus="Untaxed", motStatus="Not valid"), TODAY)
        assert untaxed.mot_and_tax.is_road_tax_due is True
        assert untaxed.mot_and_tax.is_mot_due is True

    def test_van_body_type(self):
        report = from_government_payload(make_payload(typeApproval="N1"), TODAY)
        assert report.identity.vehicle_type == "Van"
        assert report.identity.body_type == "Van"


class TestDateHelpers:
    def test_parse_formats(self):
        assert parse_date("2025-12-01") == date(2025, 12, 1)
        assert parse_date("2017-09") == date(2017, 9, 1)
        assert parse_date("2025-08-20T10:15:00") == date(2025, 8, 20)
        assert parse_date("not a date") is None
        assert parse_date(None) is None

    def test_due_window_inclusive(self):
        assert is_due_within(date(2025, 12, 15), TODAY, 30) is True
        assert is_due_within(TODAY, TODAY, 30) is True
        assert is_due_within(date(2025, 12, 16), TODAY, 30) is False
        assert is_due_within(date(2025, 11, 14), TODAY, 30) is False
        assert is_due_within(None, TODAY, 30) is False

    def test_describe_duration(self):
        assert describe_duration(date(2017, 9, 7), date(2020, 10, 19)) == "3 years, 1 month and 12 days"
        assert describe_duration(date(2020, 1, 31), date(2020, 3, 1)) == "1 month and 1 day"
        assert describe_duration(date(2020, 5, 5), date(2022, 5, 5)) == "2 years"
        assert describe_duration(TODAY, TODAY) == "0 days"
