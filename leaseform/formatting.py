"""Rendering of application records for review and for email.

``review_sections`` turns a record into titled sections of ``(label, value)``
rows; the wizard's review step and both email renderings are built from it,
so every empty field shows the same fallback everywhere. Rendering never
modifies the record.
"""

import html
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Tuple

from dateutil import parser as date_parser

from leaseform.fields import FIELD_INDEX, NOT_PROVIDED, is_blank
from leaseform.types import FieldKind

Row = Tuple[str, str]
Section = Tuple[str, List[Row]]
Clock = Callable[[], datetime]

CURRENCY_SYMBOL = "$"

_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


@dataclass(frozen=True)
class FormattedApplication:
    """A rendered application email.

    Attributes:
        subject: Email subject line
        plain_text: Plain-text body
        rich_text: HTML body
    """
    subject: str
    plain_text: str
    rich_text: str


def format_date(value: Optional[str], fallback: str = NOT_PROVIDED) -> str:
    """Render a date as M/D/YYYY.

    Empty input returns ``fallback``. Input that cannot be parsed, or that
    lacks a day, month or year, is returned unchanged.

    Examples:
        >>> format_date("2024-03-05")
        '3/5/2024'
        >>> format_date("next spring")
        'next spring'
        >>> format_date("March 5")
        'March 5'
    """
    if is_blank(value):
        return fallback
    try:
        # Parts missing from the input are taken from ``default``, so a
        # complete date parses the same under both.
        first, second = (date_parser.parse(value, default=d) for d in _FILL_DEFAULTS)
    except (ValueError, OverflowError, TypeError):
        return value
    if first.date() != second.date():
        return value
    return f"{first.month}/{first.day}/{first.year}"


def format_money(value: Optional[str], fallback: str = NOT_PROVIDED) -> str:
    if is_blank(value):
        return fallback
    return f"{CURRENCY_SYMBOL}{str(value).strip()}"


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%m/%d/%Y, %I:%M:%S %p")


def field_value(record: Mapping[str, Any], name: str) -> str:
    """Render one field with its kind-specific formatting and fallback."""
    spec = FIELD_INDEX[name]
    value = record.get(name)
    if spec.kind == FieldKind.DATE:
        return format_date(value, spec.fallback)
    if spec.kind == FieldKind.MONEY:
        return format_money(value, spec.fallback)
    if spec.kind == FieldKind.BOOLEAN:
        return "Yes" if value is True else "No"
    if is_blank(value):
        return spec.fallback
    return str(value).strip()


def _join(record: Mapping[str, Any], *names: str) -> str:
    return " ".join(str(record.get(n)).strip() for n in names if not is_blank(record.get(n)))


def applicant_name(record: Mapping[str, Any]) -> str:
    return _join(record, "firstName", "lastName") or NOT_PROVIDED


def address_line(record: Mapping[str, Any]) -> str:
    street = _join(record, "currentAddress")
    city = _join(record, "city")
    region = _join(record, "state", "zipCode")
    parts = [p for p in (street, city, region) if p]
    return ", ".join(parts) or NOT_PROVIDED


def reference_line(record: Mapping[str, Any], number: int) -> str:
    prefix = f"ref{number}"
    return (
        f"{field_value(record, prefix + 'Name')} - {field_value(record, prefix + 'Phone')} "
        f"({field_value(record, prefix + 'Relationship')})"
    )


def _rows(record: Mapping[str, Any], *names: str) -> List[Row]:
    rows = []
    for name in names:
        spec = FIELD_INDEX[name]
        if spec.is_visible(record):
            rows.append((spec.label, field_value(record, name)))
    return rows


def review_sections(record: Mapping[str, Any]) -> List[Section]:
    """Group a record into titled sections of rendered rows."""
    personal = [
        ("Name", applicant_name(record)),
        *_rows(record, "email", "phone", "dateOfBirth", "ssn", "driversLicense"),
        ("Current Address", address_line(record)),
        *_rows(record, "timeAtCurrentAddress", "reasonForMoving"),
    ]
    employment = _rows(
        record, "employmentStatus", "monthlyIncome", "employer", "employerAddress",
        "jobTitle", "employmentLength", "supervisorContact",
    )
    history = _rows(
        record, "previousAddress", "previousLandlord", "previousLandlordPhone",
        "previousRent", "reasonForLeaving",
    )
    references = [
        ("Reference 1", reference_line(record, 1)),
        ("Reference 2", reference_line(record, 2)),
    ]
    additional = _rows(
        record, "pets", "petDetails", "smoking", "occupants", "moveInDate",
        "fundsAtHand", "intendedLeaseTime", "declaredBankruptcy", "paymentMethod",
        "additionalInfo",
    )
    return [
        ("Personal Information", personal),
        ("Employment Information", employment),
        ("Rental History", history),
        ("References", references),
        ("Additional Information", additional),
    ]


def format_subject(record: Mapping[str, Any]) -> str:
    return f"New Rental Application - {applicant_name(record)}"


def format_plain_text(record: Mapping[str, Any], submitted_at: datetime) -> str:
    lines = [
        "NEW RENTAL APPLICATION",
        "",
        f"APPLICANT: {applicant_name(record)}",
        f"EMAIL: {field_value(record, 'email')}",
        f"PHONE: {field_value(record, 'phone')}",
    ]
    for title, rows in review_sections(record):
        lines.append("")
        lines.append(f"{title.upper()}:")
        lines.extend(f"{label}: {value}" for label, value in rows)
    lines.append("")
    lines.append(f"Submitted: {format_timestamp(submitted_at)}")
    return "\n".join(lines) + "\n"


_STYLE = (
    "body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 800px; margin: 0 auto; }\n"
    ".header { background: #0f766e; color: white; padding: 24px; text-align: center; }\n"
    ".section { background: #f8f9fa; padding: 20px; margin: 16px 0; border-left: 4px solid #0f766e; }\n"
    ".label { font-weight: bold; color: #555; }\n"
    ".footer { text-align: center; margin-top: 24px; padding: 16px; background: #e9ecef; }"
)


def format_rich_text(record: Mapping[str, Any], submitted_at: datetime) -> str:
    esc = html.escape
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<style>\n{_STYLE}\n</style>",
        "</head>",
        "<body>",
        '<div class="header">',
        "<h1>New Rental Application</h1>",
        f"<p>Application from {esc(applicant_name(record))}</p>",
        "</div>",
    ]
    for title, rows in review_sections(record):
        parts.append('<div class="section">')
        parts.append(f"<h2>{esc(title)}</h2>")
        for label, value in rows:
            parts.append(
                f'<div class="info-row"><span class="label">{esc(label)}:</span> '
                f'<span class="value">{esc(value)}</span></div>'
            )
        parts.append("</div>")
    parts.extend([
        '<div class="footer">',
        f"<p><strong>Application submitted on:</strong> {esc(format_timestamp(submitted_at))}</p>",
        "<p>Please review this application and contact the applicant if you need additional information.</p>",
        "</div>",
        "</body>",
        "</html>",
    ])
    return "\n".join(parts) + "\n"


def format_application(
    record: Mapping[str, Any],
    clock: Optional[Clock] = None,
) -> FormattedApplication:
    """Render a record into an email subject, plain-text body and HTML body.

    Args:
        record: The application record
        clock: Returns the render timestamp; defaults to ``datetime.now``

    Returns:
        FormattedApplication; identical records rendered at the same instant
        produce identical output
    """
    submitted_at = (clock or datetime.now)()
    return FormattedApplication(
        subject=format_subject(record),
        plain_text=format_plain_text(record, submitted_at),
        rich_text=format_rich_text(record, submitted_at),
    )


__all__ = [
    "FormattedApplication",
    "format_date",
    "format_money",
    "format_timestamp",
    "field_value",
    "review_sections",
    "format_subject",
    "format_plain_text",
    "format_rich_text",
    "format_application",
]
