"""
reports.py
Report filtering and report generation.

The filter_* functions are pure: they take records already loaded from the
store and a ReportFilter and return the matching subset, in input order,
with a count and an amount total. build_report() turns a filter into a
titled table ready for export; generate_report_async() runs the whole thing
on a worker thread.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Sequence

import advances
import assignments
import attendance
import db
import payments
import sites
import utils
import workers
from export import EXPORT_FORMATS, Document, Section, write_document
from models import Advance, Attendance, Payment, Site, Worker

logger = logging.getLogger(__name__)

REPORT_TYPES = ("WORKER_LIST", "PAYMENT_HISTORY", "ADVANCE_PAYMENT", "SITE_SUMMARY", "ATTENDANCE")

REPORT_TITLES = {
    "WORKER_LIST": "Worker List Report",
    "PAYMENT_HISTORY": "Payment History Report",
    "ADVANCE_PAYMENT": "Advance Payment Report",
    "SITE_SUMMARY": "Site Summary Report",
    "ATTENDANCE": "Attendance Report",
}


@dataclass(frozen=True)
class ReportFilter:
    report_type: str = "WORKER_LIST"
    start_date: str | None = None
    end_date: str | None = None
    worker_id: int | None = None
    site_id: int | None = None
    export_format: str = "PDF"

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None and self.end_date is not None


@dataclass(frozen=True)
class FilterResult:
    records: tuple
    count: int
    total: float


def validate_report_filter(report_filter: ReportFilter) -> list[str]:
    errors: list[str] = []
    if report_filter.report_type not in REPORT_TYPES:
        errors.append(f"Unknown report type: {report_filter.report_type}")
    if report_filter.export_format not in EXPORT_FORMATS:
        errors.append(f"Unknown export format: {report_filter.export_format}")
    for label, value in (("Start date", report_filter.start_date), ("End date", report_filter.end_date)):
        if value is not None and not utils.is_valid_date(value):
            errors.append(f"{label} must be a valid date (YYYY-MM-DD).")
    if not errors and report_filter.has_date_range:
        if utils.parse_date(report_filter.start_date) > utils.parse_date(report_filter.end_date):
            errors.append("Start date cannot be after end date.")
    return errors


def _date_range(report_filter: ReportFilter) -> tuple[date, date] | None:
    if not report_filter.has_date_range:
        return None
    # a bad bound is the caller's mistake, not a per-record problem
    return (
        utils.parse_date(utils.require_date(report_filter.start_date, "start date")),
        utils.parse_date(utils.require_date(report_filter.end_date, "end date")),
    )


def _in_range(record, record_date: str, bounds: tuple[date, date]) -> bool:
    try:
        d = utils.parse_date(record_date)
    except (TypeError, ValueError):
        logger.warning(
            "excluding %s %s from report: unparseable date %r",
            type(record).__name__, record.id, record_date,
        )
        return False
    return bounds[0] <= d <= bounds[1]


def _filter(records: Sequence, report_filter: ReportFilter, date_of: Callable, by_site: bool) -> list:
    bounds = _date_range(report_filter)
    out = list(records)
    if bounds is not None:
        out = [r for r in out if _in_range(r, date_of(r), bounds)]
    if report_filter.worker_id is not None:
        out = [r for r in out if r.worker_id == report_filter.worker_id]
    if by_site and report_filter.site_id is not None:
        out = [r for r in out if r.site_id == report_filter.site_id]
    return out


def filter_payments(records: Sequence[Payment], report_filter: ReportFilter) -> FilterResult:
    kept = _filter(records, report_filter, lambda p: p.payment_date, by_site=True)
    return FilterResult(tuple(kept), len(kept), sum(p.amount for p in kept))


def filter_advances(records: Sequence[Advance], report_filter: ReportFilter) -> FilterResult:
    # advances carry no site, site_id is ignored
    kept = _filter(records, report_filter, lambda a: a.advance_date, by_site=False)
    return FilterResult(tuple(kept), len(kept), sum(a.amount for a in kept))


def filter_attendance(records: Sequence[Attendance], report_filter: ReportFilter) -> FilterResult:
    kept = _filter(records, report_filter, lambda a: a.date, by_site=True)
    return FilterResult(tuple(kept), len(kept), 0.0)


def filter_workers(records: Sequence[Worker], report_filter: ReportFilter) -> FilterResult:
    kept = [w for w in records if report_filter.worker_id is None or w.id == report_filter.worker_id]
    return FilterResult(tuple(kept), len(kept), 0.0)


def filter_sites(records: Sequence[Site], report_filter: ReportFilter) -> FilterResult:
    kept = [s for s in records if report_filter.site_id is None or s.id == report_filter.site_id]
    return FilterResult(tuple(kept), len(kept), 0.0)


# ---------- report building ----------

@dataclass(frozen=True)
class Report:
    report_filter: ReportFilter
    document: Document
    result: FilterResult

    @property
    def title(self) -> str:
        return self.document.title


def _money(amount: float) -> str:
    return utils.format_rupees(amount)


def _amount_cell(amount: float, export_format: str):
    # spreadsheets keep the number so columns can be summed
    if export_format == "EXCEL":
        return round(float(amount), 2)
    return _money(amount)


def build_report(store: db.Store, report_filter: ReportFilter) -> Report:
    """Load everything the report needs from one snapshot and lay it out as a table."""
    errors = validate_report_filter(report_filter)
    if errors:
        raise ValueError("; ".join(errors))

    rtype = report_filter.report_type
    with store.snapshot() as conn:
        all_workers = workers.list_workers(store, conn=conn)
        all_sites = sites.list_sites(store, conn=conn)
        worker_names = {w.id: w.name for w in all_workers}
        site_names = {s.id: s.name for s in all_sites}
        sections: list[Section] = []

        if rtype == "WORKER_LIST":
            result = filter_workers(all_workers, report_filter)
            columns = ["ID", "Name", "Phone", "Role", "Status"]
            rows = [[w.id, w.name, w.phone, w.role, "Active" if w.is_active else "Inactive"] for w in result.records]
            summary = f"Total Workers: {result.count}"

        elif rtype == "PAYMENT_HISTORY":
            result = filter_payments(payments.list_payments(store, conn=conn), report_filter)
            columns = ["ID", "Worker", "Site", "Date", "Amount (Rs.)", "Mode"]
            rows = [
                [p.id, worker_names.get(p.worker_id, "Unknown"), site_names.get(p.site_id, "Unknown"),
                 p.payment_date, _amount_cell(p.amount, report_filter.export_format), p.payment_mode]
                for p in result.records
            ]
            summary = f"Total Payments: {result.count} | Total Amount: Rs. {_money(result.total)}"

        elif rtype == "ADVANCE_PAYMENT":
            result = filter_advances(advances.list_advances(store, conn=conn), report_filter)
            columns = ["ID", "Worker", "Date", "Amount (Rs.)", "Reason", "Settled"]
            rows = [
                [a.id, worker_names.get(a.worker_id, "Unknown"), a.advance_date,
                 _amount_cell(a.amount, report_filter.export_format), a.reason, "Yes" if a.is_recovered else "No"]
                for a in result.records
            ]
            summary = f"Total Advances: {result.count} | Total Amount: Rs. {_money(result.total)}"

        elif rtype == "SITE_SUMMARY":
            result = filter_sites(all_sites, report_filter)
            columns = ["ID", "Name", "Client", "Start Date", "Status"]
            rows = [[s.id, s.name, s.client_name, s.start_date, s.status] for s in result.records]
            for s in result.records:
                assigned = assignments.get_workers_for_site(store, s.id, conn=conn)
                sections.append(Section(
                    heading=f"Workers assigned to {s.name}",
                    columns=["ID", "Name", "Role"],
                    rows=[[w.id, w.name, w.role] for w in assigned],
                    empty_text="No workers assigned to this site.",
                ))
            summary = f"Total Sites: {result.count}"

        else:  # ATTENDANCE
            result = filter_attendance(attendance.list_attendance(store, conn=conn), report_filter)
            columns = ["ID", "Worker", "Site", "Date", "Status", "Hours"]
            rows = [
                [a.id, worker_names.get(a.worker_id, "Unknown"), site_names.get(a.site_id, "Unknown"),
                 a.date, a.status, "" if a.hours_worked is None else a.hours_worked]
                for a in result.records
            ]
            summary = f"Total Attendance Records: {result.count}"

    subtitle = None
    if report_filter.has_date_range:
        subtitle = f"Date Range: {report_filter.start_date} to {report_filter.end_date}"

    document = Document(
        title=REPORT_TITLES[rtype],
        columns=columns,
        rows=rows,
        subtitle=subtitle,
        summary=summary,
        sections=sections,
    )
    return Report(report_filter, document, result)


def report_file_name(report_filter: ReportFilter, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{report_filter.report_type.lower()}_{stamp}{EXPORT_FORMATS[report_filter.export_format]}"


def generate_report(store: db.Store, report_filter: ReportFilter, out_dir: str | Path) -> Path:
    """Build the report and write it under out_dir. Returns the written path."""
    report = build_report(store, report_filter)
    path = Path(out_dir) / report_file_name(report_filter)
    write_document(path, report_filter.export_format, report.document)
    logger.info("%s generated: %s record(s) -> %s", report.title, report.result.count, path)
    return path


def generate_report_async(store: db.Store, report_filter: ReportFilter, out_dir: str | Path,
                          executor: Executor) -> Future:
    """
    Run generate_report on `executor`. The returned future resolves to the
    written path or raises what generation raised (ValueError, ExportError,
    sqlite3.Error).
    """

    def task() -> Path:
        try:
            return generate_report(store, report_filter, out_dir)
        except Exception:
            logger.exception("report generation failed for %s", report_filter.report_type)
            raise

    return executor.submit(task)
