import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import openpyxl
import pytest

import advances
import assignments
import attendance
import payments
import reports
from models import Advance, Attendance, Payment
from reports import ReportFilter


def pay(pid, worker_id, amount, d, site_id=1):
    return Payment(pid, worker_id, site_id, d, amount, "Wages", "CASH")


PAYMENTS = [
    pay(1, 1, 500.0, "2024-01-10"),
    pay(2, 2, 300.0, "2024-01-20"),
]


def test_date_range_filter_on_payments():
    f = ReportFilter("PAYMENT_HISTORY", start_date="2024-01-01", end_date="2024-01-15")
    result = reports.filter_payments(PAYMENTS, f)
    assert [p.id for p in result.records] == [1]
    assert result.count == 1
    assert result.total == 500


def test_range_is_inclusive_on_both_ends():
    f = ReportFilter("PAYMENT_HISTORY", start_date="2024-01-10", end_date="2024-01-20")
    assert [p.id for p in reports.filter_payments(PAYMENTS, f).records] == [1, 2]


def test_filtering_is_repeatable():
    f = ReportFilter("PAYMENT_HISTORY", start_date="2024-01-01", end_date="2024-01-31", worker_id=2)
    assert reports.filter_payments(PAYMENTS, f) == reports.filter_payments(PAYMENTS, f)


def test_unparseable_record_date_is_excluded_and_logged(caplog):
    records = PAYMENTS + [pay(3, 1, 900.0, "12/01/2024")]
    f = ReportFilter("PAYMENT_HISTORY", start_date="2024-01-01", end_date="2024-01-31")
    with caplog.at_level(logging.WARNING, logger="reports"):
        result = reports.filter_payments(records, f)
    assert [p.id for p in result.records] == [1, 2]
    assert result.total == 800
    assert "12/01/2024" in caplog.text


def test_bad_record_date_is_kept_without_date_range():
    records = [pay(3, 1, 900.0, "12/01/2024")]
    assert reports.filter_payments(records, ReportFilter("PAYMENT_HISTORY")).count == 1


def test_single_bound_does_not_filter_by_date():
    f = ReportFilter("PAYMENT_HISTORY", start_date="2024-01-15")
    assert reports.filter_payments(PAYMENTS, f).count == 2


def test_bad_filter_bound_is_a_validation_error():
    f = ReportFilter("PAYMENT_HISTORY", start_date="2024-13-01", end_date="2024-01-31")
    with pytest.raises(ValueError):
        reports.filter_payments(PAYMENTS, f)
    assert reports.validate_report_filter(f)


def test_worker_and_site_filters_preserve_order():
    records = [
        pay(1, 1, 10.0, "2024-03-01", site_id=1),
        pay(2, 1, 20.0, "2024-02-01", site_id=2),
        pay(3, 2, 30.0, "2024-01-01", site_id=1),
        pay(4, 1, 40.0, "2024-01-01", site_id=1),
    ]
    result = reports.filter_payments(records, ReportFilter("PAYMENT_HISTORY", worker_id=1, site_id=1))
    assert [p.id for p in result.records] == [1, 4]
    assert result.total == 50


def test_advances_ignore_site_filter():
    records = [
        Advance(1, 5, 1000.0, "2024-01-05", "Medical", None, "CASH"),
        Advance(2, 6, 200.0, "2024-01-06", "Travel", None, "CASH"),
    ]
    result = reports.filter_advances(records, ReportFilter("ADVANCE_PAYMENT", worker_id=5, site_id=99))
    assert [a.id for a in result.records] == [1]
    assert result.total == 1000


def test_attendance_filter_counts_without_total():
    records = [
        Attendance(1, 1, 1, "2024-01-01", "PRESENT"),
        Attendance(2, 1, 2, "2024-01-02", "ABSENT"),
        Attendance(3, 2, 1, "2024-01-03", "LEAVE"),
    ]
    result = reports.filter_attendance(records, ReportFilter("ATTENDANCE", site_id=1))
    assert [a.id for a in result.records] == [1, 3]
    assert (result.count, result.total) == (2, 0)


def test_validate_report_filter():
    assert reports.validate_report_filter(ReportFilter("PAYMENT_HISTORY")) == []
    assert reports.validate_report_filter(ReportFilter("PAYROLL"))
    assert reports.validate_report_filter(ReportFilter("ATTENDANCE", export_format="DOCX"))
    assert reports.validate_report_filter(
        ReportFilter("ATTENDANCE", start_date="2024-02-01", end_date="2024-01-01")
    )


@pytest.fixture
def populated(store, make_worker, make_site):
    w1, w2 = make_worker("Ramesh"), make_worker("Suresh")
    s1 = make_site("Green Valley")
    assignments.assign_worker_to_site(store, w1, s1, "2024-01-01")
    payments.insert_payment(store, Payment(None, w1, s1, "2024-01-10", 500.0, "Wages", "CASH"))
    payments.insert_payment(store, Payment(None, w2, None, "2024-01-20", 300.0, "Wages", "CASH"))
    advances.insert_advance(store, Advance(None, w1, 1000.0, "2024-01-05", "Medical", None, "CASH"))
    attendance.insert_attendance(store, Attendance(None, w1, s1, "2024-01-10", "PRESENT", 8.0))
    return {"w1": w1, "w2": w2, "s1": s1}


def test_build_payment_report(store, populated):
    f = ReportFilter("PAYMENT_HISTORY", start_date="2024-01-01", end_date="2024-01-31")
    report = reports.build_report(store, f)

    assert report.title == "Payment History Report"
    assert report.document.subtitle == "Date Range: 2024-01-01 to 2024-01-31"
    # newest first, payment without a site shows as Unknown
    assert [row[1:3] for row in report.document.rows] == [["Suresh", "Unknown"], ["Ramesh", "Green Valley"]]
    assert report.document.summary == "Total Payments: 2 | Total Amount: Rs. 800.00"


def test_build_site_summary_lists_assigned_workers(store, populated):
    report = reports.build_report(store, ReportFilter("SITE_SUMMARY"))
    assert report.document.summary == "Total Sites: 1"
    (section,) = report.document.sections
    assert section.heading == "Workers assigned to Green Valley"
    assert [row[1] for row in section.rows] == ["Ramesh"]


def test_build_worker_list(store, populated):
    report = reports.build_report(store, ReportFilter("WORKER_LIST", worker_id=populated["w2"]))
    assert report.document.rows == [[populated["w2"], "Suresh", "9800000001", "Mason", "Active"]]


def test_build_report_rejects_invalid_filter(store):
    with pytest.raises(ValueError):
        reports.build_report(store, ReportFilter("PAYROLL"))


def test_report_file_name():
    f = ReportFilter("ADVANCE_PAYMENT", export_format="EXCEL")
    assert reports.report_file_name(f, datetime(2024, 5, 6, 7, 8, 9)) == "advance_payment_20240506_070809.xlsx"


@pytest.mark.parametrize("fmt", ["PDF", "EXCEL", "CSV"])
def test_generate_report_writes_file(store, populated, tmp_path, fmt):
    out = tmp_path / "reports"
    path = reports.generate_report(store, ReportFilter("SITE_SUMMARY", export_format=fmt), out)
    assert path.exists()
    assert path.stat().st_size > 0
    assert [p.name for p in out.iterdir()] == [path.name]


def test_generated_csv_contents(store, populated, tmp_path):
    f = ReportFilter("ADVANCE_PAYMENT", export_format="CSV")
    path = reports.generate_report(store, f, tmp_path)
    text = path.read_text(encoding="utf-8")
    assert text.splitlines()[0] == "ID,Worker,Date,Amount (Rs.),Reason,Settled"
    assert "Total Advances: 1 | Total Amount: Rs. 1,000.00" in text


def test_excel_amounts_stay_numeric(store, populated, tmp_path):
    csv_report = reports.build_report(store, ReportFilter("ADVANCE_PAYMENT", export_format="CSV"))
    assert csv_report.document.rows[0][3] == "1,000.00"

    f = ReportFilter("ADVANCE_PAYMENT", export_format="EXCEL")
    path = reports.generate_report(store, f, tmp_path)
    ws = openpyxl.load_workbook(path)["Advance Payment Report"]
    assert ws["D1"].value == "Amount (Rs.)"
    assert ws["D2"].value == 1000.0


def test_generate_report_async(store, populated, tmp_path):
    with ThreadPoolExecutor(max_workers=1) as executor:
        ok = reports.generate_report_async(store, ReportFilter("ATTENDANCE", export_format="CSV"), tmp_path, executor)
        bad = reports.generate_report_async(store, ReportFilter("PAYROLL"), tmp_path, executor)
        assert ok.result().exists()
        with pytest.raises(ValueError):
            bad.result()


def test_generate_report_async_surfaces_store_errors(store, tmp_path, monkeypatch):
    def locked(*args, **kwargs):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(reports.workers, "list_workers", locked)
    with ThreadPoolExecutor(max_workers=1) as executor:
        future = reports.generate_report_async(store, ReportFilter("WORKER_LIST", export_format="CSV"), tmp_path, executor)
        with pytest.raises(sqlite3.Error, match="locked"):
            future.result()
    assert list(tmp_path.iterdir()) == []
