"""
Reminder scheduling and template rendering helpers
Pure functions shared by the reminder API and the delivery worker
"""

import math
from datetime import datetime, timedelta
from typing import Optional, TypedDict

MINUTES_PER_DAY = 24 * 60


class TemplateVars(TypedDict, total=False):
    clientName: str
    invoiceId: str
    amount: str
    dueDate: str
    paymentLink: str
    companyName: str


class UnknownPresetError(KeyError):
    """Raised when a reminder preset name is not defined"""

    pass


# Static reminder cadences: pre-due nudge, due-date notice, overdue escalation
REMINDER_PRESETS = {
    "standard": [
        {
            "index": 0,
            "days_before_due": 3,
            "offset_from_due_in_minutes": -3 * MINUTES_PER_DAY,
        },
        {
            "index": 1,
            "days_after_due": 0,
            "offset_from_due_in_minutes": 0,
        },
        {
            "index": 2,
            "days_after_due": 7,
            "offset_from_due_in_minutes": 7 * MINUTES_PER_DAY,
        },
    ],
}

# Placeholders always substituted (empty string when the value is missing)
REQUIRED_PLACEHOLDERS = ("clientName", "invoiceId", "amount", "dueDate")
# Placeholders substituted only when a value is supplied
OPTIONAL_PLACEHOLDERS = ("paymentLink", "companyName")


def get_preset(name: str) -> list[dict]:
    """Return the ordered offsets of a named preset"""
    try:
        return REMINDER_PRESETS[name]
    except KeyError:
        raise UnknownPresetError(name) from None


def replace_template_variables(template: Optional[str], vars: TemplateVars) -> str:
    """
    Replace handlebars-style placeholders in a template string.

    Only the known placeholders are touched; any other {{token}} is left as-is.
    Values are inserted verbatim, so callers must escape anything headed for HTML.
    """
    if not template:
        return ""

    result = template
    for name in REQUIRED_PLACEHOLDERS:
        result = result.replace("{{" + name + "}}", vars.get(name) or "")

    for name in OPTIONAL_PLACEHOLDERS:
        value = vars.get(name)
        if value:
            result = result.replace("{{" + name + "}}", value)

    return result


def compute_send_at(due_at: datetime, offset_in_minutes: int) -> datetime:
    """Absolute send time: due date plus the offset, as plain minute arithmetic"""
    return due_at + timedelta(minutes=offset_in_minutes)


def get_offset_label(offset_in_minutes: int) -> str:
    """Readable label for an offset, e.g. "3 days before due" """
    if offset_in_minutes == 0:
        return "On due date"

    # Half-up rounding of whole days; 2200 minutes reads as "2 days"
    days = math.floor(abs(offset_in_minutes) / MINUTES_PER_DAY + 0.5)
    unit = "days" if days > 1 else "day"

    if offset_in_minutes < 0:
        return f"{days} {unit} before due"
    return f"{days} {unit} after due"


def describe_preset(name: str) -> list[dict]:
    """Preset entries with their derived labels attached"""
    return [
        {**step, "label": get_offset_label(step["offset_from_due_in_minutes"])}
        for step in get_preset(name)
    ]
