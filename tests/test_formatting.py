"""Unit tests for review and email rendering.

Tests cover:
- Date and money helpers
- Fallback text for empty fields in both renderings
- Conditional pet details
- Determinism apart from the render timestamp
- HTML escaping
"""

from datetime import datetime

import pytest

from leaseform import formatting
from leaseform.fields import new_record
from leaseform.formatting import (
    FormattedApplication,
    format_application,
    format_date,
    format_money,
    format_timestamp,
    review_sections,
)

from tests.conftest import FIXED_NOW, fixed_clock, jane_doe


class TestFormatDate:
    """Test the date helper."""

    def test_iso_date(self):
        assert format_date("2024-03-05") == "3/5/2024"

    def test_empty_uses_fallback(self):
        assert format_date("") == "Not provided"
        assert format_date(None) == "Not provided"

    def test_unparseable_returned_unchanged(self):
        assert format_date("sometime soon") == "sometime soon"

    def test_out_of_range_returned_unchanged(self):
        assert format_date("2024-13-45") == "2024-13-45"

    @pytest.mark.parametrize("value", ["March 5", "15", "2024-03", "10:30"])
    def test_partial_date_returned_unchanged(self, value):
        assert format_date(value) == value

    def test_slash_date(self):
        assert format_date("07/01/2024") == "7/1/2024"


class TestFormatMoney:
    """Test the currency helper."""

    def test_prefixes_symbol(self):
        assert format_money("4000") == "$4000"

    def test_empty_uses_fallback(self):
        assert format_money("") == "Not provided"

    def test_does_not_modify_record(self):
        record = jane_doe()
        format_application(record, clock=fixed_clock)
        assert record["monthlyIncome"] == "4000"


class TestPlainText:
    """Test the plain-text rendering."""

    def test_employer_fallback_line(self):
        formatted = format_application(jane_doe(), clock=fixed_clock)
        assert "Employer: Not provided" in formatted.plain_text.splitlines()

    def test_applicant_summary(self):
        text = format_application(jane_doe(), clock=fixed_clock).plain_text
        lines = text.splitlines()
        assert lines[0] == "NEW RENTAL APPLICATION"
        assert "APPLICANT: Jane Doe" in lines
        assert "EMAIL: jane@x.com" in lines
        assert "Monthly Income: $4000" in lines

    def test_section_headings(self):
        text = format_application(jane_doe(), clock=fixed_clock).plain_text
        for heading in (
            "PERSONAL INFORMATION:",
            "EMPLOYMENT INFORMATION:",
            "RENTAL HISTORY:",
            "REFERENCES:",
            "ADDITIONAL INFORMATION:",
        ):
            assert heading in text.splitlines()

    def test_specific_fallbacks(self):
        lines = format_application(jane_doe(), clock=fixed_clock).plain_text.splitlines()
        assert "Pets: Not specified" in lines
        assert "Smoking: Not specified" in lines
        assert "Reference 1: Not provided - No phone (No relationship specified)" in lines
        assert "Date of Birth: Not provided" in lines
        assert "Previous Rent: Not provided" in lines

    def test_timestamp_line(self):
        text = format_application(jane_doe(), clock=fixed_clock).plain_text
        assert f"Submitted: {format_timestamp(FIXED_NOW)}" in text.splitlines()

    def test_no_empty_values(self):
        text = format_application(new_record(), clock=fixed_clock).plain_text
        for line in text.splitlines():
            if ": " in line:
                assert line.split(": ", 1)[1].strip() != ""
        assert "None:" not in text
        assert "undefined" not in text


class TestRichText:
    """Test the HTML rendering."""

    def test_sections_present(self):
        html = format_application(jane_doe(), clock=fixed_clock).rich_text
        for title in (
            "Personal Information",
            "Employment Information",
            "Rental History",
            "References",
            "Additional Information",
        ):
            assert f"<h2>{title}</h2>" in html

    def test_fallbacks_present(self):
        html = format_application(jane_doe(), clock=fixed_clock).rich_text
        assert '<span class="label">Employer:</span> <span class="value">Not provided</span>' in html
        assert '<span class="label">Pets:</span> <span class="value">Not specified</span>' in html

    def test_no_empty_value_spans(self):
        html = format_application(new_record(), clock=fixed_clock).rich_text
        assert '<span class="value"></span>' not in html

    def test_timestamp_in_footer(self):
        html = format_application(jane_doe(), clock=fixed_clock).rich_text
        assert format_timestamp(FIXED_NOW) in html

    def test_values_escaped(self):
        record = jane_doe(additionalInfo="<script>alert(1)</script>")
        html = format_application(record, clock=fixed_clock).rich_text
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestPetDetails:
    """Test the conditional pet details row."""

    def test_hidden_without_pets(self):
        sections = dict(review_sections(jane_doe(pets="no", petDetails="A cat")))
        labels = [label for label, _ in sections["Additional Information"]]
        assert "Pet Details" not in labels

    def test_shown_with_pets(self):
        sections = dict(review_sections(jane_doe(pets="yes", petDetails="One cat")))
        assert ("Pet Details", "One cat") in sections["Additional Information"]

    def test_fallback_when_pets_but_no_details(self):
        sections = dict(review_sections(jane_doe(pets="yes")))
        assert ("Pet Details", "None") in sections["Additional Information"]


class TestDeterminism:
    """Test that formatting is a pure function of record and clock."""

    def test_identical_records_identical_output(self):
        first = format_application(jane_doe(), clock=fixed_clock)
        second = format_application(jane_doe(), clock=fixed_clock)
        assert first == second

    def test_only_timestamp_differs(self):
        first = format_application(jane_doe(), clock=fixed_clock)
        later = datetime(2025, 1, 2, 9, 0, 0)
        second = format_application(jane_doe(), clock=lambda: later)
        assert first.plain_text.replace(format_timestamp(FIXED_NOW), "") == \
            second.plain_text.replace(format_timestamp(later), "")
        assert first.rich_text.replace(format_timestamp(FIXED_NOW), "") == \
            second.rich_text.replace(format_timestamp(later), "")

    def test_partial_dates_independent_of_today(self, monkeypatch):
        real_parse = formatting.date_parser.parse
        record = jane_doe(moveInDate="March 5", dateOfBirth="15")

        def render_on(today):
            def parse(value, default=None, **kwargs):
                return real_parse(value, default=default or today, **kwargs)
            monkeypatch.setattr(formatting.date_parser, "parse", parse)
            return format_application(record, clock=fixed_clock)

        first = render_on(datetime(2024, 5, 17))
        second = render_on(datetime(2031, 11, 2))
        assert first == second
        assert "Desired Move-in Date: March 5" in first.plain_text.splitlines()

    def test_subject(self):
        formatted = format_application(jane_doe(), clock=fixed_clock)
        assert isinstance(formatted, FormattedApplication)
        assert formatted.subject == "New Rental Application - Jane Doe"

    @pytest.mark.parametrize("name,expected", [("moveInDate", "Desired Move-in Date: 6/1/2024")])
    def test_date_rows(self, name, expected):
        text = format_application(jane_doe(**{name: "2024-06-01"}), clock=fixed_clock).plain_text
        assert expected in text.splitlines()
