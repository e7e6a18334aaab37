"""
utils.py
Dates, input validation, money formatting and DataFrame helpers.
"""

from __future__ import annotations

import math
from dataclasses import asdict, is_dataclass
from datetime import date, datetime

import pandas as pd

from models import ATTENDANCE_STATUSES, DATE_FORMAT, PAYMENT_MODES, SITE_STATUSES


def today_iso() -> str:
    return date.today().strftime(DATE_FORMAT)


def parse_date(d: str) -> date:
    """Strict YYYY-MM-DD parse; raises ValueError on anything else."""
    return datetime.strptime(d, DATE_FORMAT).date()


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def is_valid_date(d) -> bool:
    if not isinstance(d, str):
        return False
    try:
        parse_date(d)
    except ValueError:
        return False
    return True


def require_date(d: str, label: str = "date") -> str:
    if not is_valid_date(d):
        raise ValueError(f"Invalid {label}: {d!r} (expected YYYY-MM-DD)")
    return d


def format_rupees(amount: float) -> str:
    """
    Indian digit grouping with two decimals, no currency symbol.
    1234567.5 -> '12,34,567.50'
    """
    sign = "-" if amount < 0 else ""
    whole, frac = f"{abs(amount):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{whole}.{frac}"


def _check_amount(amount, errors: list[str]) -> None:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        errors.append("Amount must be numeric.")
        return
    if not math.isfinite(value):
        errors.append("Amount must be numeric.")
    elif value < 0:
        errors.append("Amount cannot be negative.")


def validate_worker_inputs(name: str, phone: str, join_date: str) -> list[str]:
    errors: list[str] = []
    if not name.strip():
        errors.append("Name is required.")
    if not phone.strip():
        errors.append("Phone is required.")
    if not is_valid_date(join_date):
        errors.append("Join date must be a valid date (YYYY-MM-DD).")
    return errors


def validate_site_inputs(name: str, start_date: str, expected_end_date: str | None, status: str) -> list[str]:
    errors: list[str] = []
    if not name.strip():
        errors.append("Site name is required.")
    if status not in SITE_STATUSES:
        errors.append(f"Status must be one of {', '.join(SITE_STATUSES)}.")
    if not is_valid_date(start_date):
        errors.append("Start date must be a valid date (YYYY-MM-DD).")
    elif expected_end_date:
        if not is_valid_date(expected_end_date):
            errors.append("Expected end date must be a valid date (YYYY-MM-DD).")
        elif parse_date(expected_end_date) < parse_date(start_date):
            errors.append("Expected end date cannot be before start date.")
    return errors


def validate_payment_inputs(worker_id, amount, payment_date: str, payment_mode: str,
                            for_month: int = 0, for_year: int = 0) -> list[str]:
    errors: list[str] = []
    if worker_id is None:
        errors.append("Select a worker.")
    _check_amount(amount, errors)
    if not is_valid_date(payment_date):
        errors.append("Payment date must be a valid date (YYYY-MM-DD).")
    if payment_mode not in PAYMENT_MODES:
        errors.append(f"Payment mode must be one of {', '.join(PAYMENT_MODES)}.")
    if not 0 <= int(for_month) <= 12:
        errors.append("Month must be between 1 and 12 (0 for none).")
    if int(for_year) < 0:
        errors.append("Year cannot be negative.")
    return errors


def validate_advance_inputs(worker_id, amount, advance_date: str, reason: str, payment_mode: str) -> list[str]:
    errors: list[str] = []
    if worker_id is None:
        errors.append("Select a worker.")
    _check_amount(amount, errors)
    if not is_valid_date(advance_date):
        errors.append("Advance date must be a valid date (YYYY-MM-DD).")
    if not reason.strip():
        errors.append("Reason is required.")
    if payment_mode not in PAYMENT_MODES:
        errors.append(f"Payment mode must be one of {', '.join(PAYMENT_MODES)}.")
    return errors


def validate_attendance_inputs(worker_id, site_id, att_date: str, status: str, hours_worked=None) -> list[str]:
    errors: list[str] = []
    if worker_id is None:
        errors.append("Select a worker.")
    if site_id is None:
        errors.append("Select a site.")
    if not is_valid_date(att_date):
        errors.append("Date must be a valid date (YYYY-MM-DD).")
    if status not in ATTENDANCE_STATUSES:
        errors.append(f"Status must be one of {', '.join(ATTENDANCE_STATUSES)}.")
    if hours_worked not in (None, ""):
        try:
            if not 0 <= float(hours_worked) <= 24:
                errors.append("Hours worked must be between 0 and 24.")
        except (TypeError, ValueError):
            errors.append("Hours worked must be numeric.")
    return errors


def records_to_df(records, columns: list[str] | None = None) -> pd.DataFrame:
    rows = [asdict(r) if is_dataclass(r) else dict(r) for r in records]
    if not rows:
        return pd.DataFrame(columns=columns or [])
    df = pd.DataFrame(rows)
    return df[columns] if columns else df
