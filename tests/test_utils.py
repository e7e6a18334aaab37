import pytest

import utils
from models import Worker


@pytest.mark.parametrize("amount,expected", [
    (0, "0.00"),
    (999.5, "999.50"),
    (1000, "1,000.00"),
    (123456.789, "1,23,456.79"),
    (1234567.5, "12,34,567.50"),
    (-2500, "-2,500.00"),
])
def test_format_rupees(amount, expected):
    assert utils.format_rupees(amount) == expected


def test_dates():
    assert utils.is_valid_date("2024-02-29")
    assert not utils.is_valid_date("2023-02-29")
    assert not utils.is_valid_date("29/02/2024")
    assert not utils.is_valid_date(None)
    assert utils.require_date("2024-01-01") == "2024-01-01"
    with pytest.raises(ValueError, match="assignment date"):
        utils.require_date("2024/01/01", "assignment date")


def test_validate_worker_inputs():
    assert utils.validate_worker_inputs("Ramesh", "98000", "2024-01-01") == []
    assert len(utils.validate_worker_inputs(" ", "", "yesterday")) == 3


def test_validate_site_inputs():
    assert utils.validate_site_inputs("Green Valley", "2024-01-01", None, "ACTIVE") == []
    assert utils.validate_site_inputs("Green Valley", "2024-01-01", "2023-12-31", "ACTIVE") == [
        "Expected end date cannot be before start date."
    ]
    assert utils.validate_site_inputs("Green Valley", "2024-01-01", None, "DONE")


def test_validate_payment_inputs():
    assert utils.validate_payment_inputs(1, "500", "2024-01-10", "CASH", 1, 2024) == []
    errors = utils.validate_payment_inputs(None, "abc", "2024-01-10", "UPI", 13, 2024)
    assert errors == [
        "Select a worker.",
        "Amount must be numeric.",
        "Payment mode must be one of CASH, BANK_TRANSFER, OTHER.",
        "Month must be between 1 and 12 (0 for none).",
    ]
    assert utils.validate_payment_inputs(1, "-5", "2024-01-10", "CASH") == ["Amount cannot be negative."]


@pytest.mark.parametrize("amount", ["nan", "inf", "-inf", float("nan")])
def test_non_finite_amounts_are_rejected(amount):
    assert utils.validate_payment_inputs(1, amount, "2024-01-10", "CASH") == ["Amount must be numeric."]
    assert utils.validate_advance_inputs(1, amount, "2024-01-05", "Medical", "CASH") == ["Amount must be numeric."]


def test_validate_advance_inputs():
    assert utils.validate_advance_inputs(1, 100, "2024-01-05", "Medical", "CASH") == []
    assert utils.validate_advance_inputs(1, 100, "2024-01-05", "", "CASH") == ["Reason is required."]


def test_validate_attendance_inputs():
    assert utils.validate_attendance_inputs(1, 1, "2024-01-05", "PRESENT", "8") == []
    assert utils.validate_attendance_inputs(1, 1, "2024-01-05", "PRESENT", "") == []
    assert utils.validate_attendance_inputs(1, None, "2024-01-05", "SICK", "30") == [
        "Select a site.",
        "Status must be one of PRESENT, ABSENT, HALF_DAY, LEAVE.",
        "Hours worked must be between 0 and 24.",
    ]


def test_records_to_df():
    rows = [Worker(1, "Ramesh", "98000", "", "Mason", "", "2024-01-01")]
    df = utils.records_to_df(rows, ["id", "name"])
    assert list(df.columns) == ["id", "name"]
    assert df.iloc[0]["name"] == "Ramesh"
    assert list(utils.records_to_df([], ["id"]).columns) == ["id"]
