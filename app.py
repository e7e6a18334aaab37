"""
app.py
Streamlit data-entry app for workers, sites, assignments, payments, advances,
attendance and reports.
Run: streamlit run app.py
"""

from __future__ import annotations

import sqlite3
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pandas as pd
import streamlit as st

import advances
import assignments
import attendance
import config
import db
import payments
import reports
import sample_data
import sites
import summary
import utils
import workers
from export import ExportError
from models import ATTENDANCE_STATUSES, PAYMENT_MODES, SITE_STATUSES, Advance, Attendance, Payment, Site, Worker

st.set_page_config(page_title="CrewLedger", layout="wide")


@st.cache_resource
def get_store() -> db.Store:
    # One store handle for the whole process
    config.setup_logging()
    config.ensure_instance()
    return db.init_db(config.Config.DB_PATH)


@st.cache_resource
def get_executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=config.Config.REPORT_WORKERS, thread_name_prefix="report")


def _d(value: str | None) -> date:
    return utils.parse_date(value) if value else date.today()


def worker_options(store: db.Store, active_only: bool = False) -> dict[str, int]:
    return {f"{w.name} ({w.phone}) - ID {w.id}": w.id for w in workers.list_workers(store, active_only=active_only)}


def site_options(store: db.Store) -> dict[str, int]:
    return {f"{s.name} [{s.status}] - ID {s.id}": s.id for s in sites.list_sites(store)}


def show_errors(errors: list[str]) -> None:
    for e in errors:
        st.error(e)


# ---------- pages ----------

def dashboard_page(store: db.Store):
    st.header("📊 Dashboard")

    counts = summary.dashboard_counts(store)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Active workers", int(counts["active_workers"]))
    c2.metric("Active sites", int(counts["active_sites"]))
    c3.metric("Unsettled advances", utils.format_rupees(counts["unsettled_advances"]))
    c4.metric("Total paid", utils.format_rupees(counts["total_paid"]))

    st.divider()

    st.subheader("Active sites")
    rows = [
        {"id": s.id, "name": s.name, "client": s.client_name, "workers": summary.worker_count_for_site(store, s.id)}
        for s in sites.list_sites(store, status="ACTIVE")
    ]
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("No active sites.")


def worker_form(store: db.Store, existing: Worker | None = None):
    if existing:
        st.subheader(f"✏️ Edit Worker (ID: {existing.id})")
    else:
        st.subheader("➕ Add Worker")

    col1, col2 = st.columns(2)
    with col1:
        name = st.text_input("Name", value=existing.name if existing else "")
        phone = st.text_input("Phone", value=existing.phone if existing else "")
        address = st.text_input("Address", value=existing.address if existing else "")
    with col2:
        role = st.text_input("Role", value=existing.role if existing else "")
        national_id = st.text_input("National ID", value=existing.national_id if existing else "")
        join_date = utils.format_date(st.date_input("Join date", value=_d(existing.join_date if existing else None)))
        is_active = st.checkbox("Active", value=existing.is_active if existing else True)

    errors = utils.validate_worker_inputs(name, phone, join_date)
    show_errors(errors)

    if st.button("Save worker", type="primary", disabled=bool(errors)):
        worker = Worker(
            existing.id if existing else None, name.strip(), phone.strip(), address.strip(), role.strip(),
            national_id.strip(), join_date, is_active, existing.profile_image_path if existing else None,
        )
        if existing:
            workers.update_worker(store, worker)
            st.success("Worker updated.")
        else:
            workers.insert_worker(store, worker)
            st.success("Worker added.")
        st.rerun()


def workers_page(store: db.Store):
    st.header("👷 Workers")

    with st.sidebar:
        st.subheader("Search")
        search = st.text_input("Search (name/phone)")
        active_only = st.checkbox("Active only", value=False)

    rows = workers.search_workers(store, search) if search.strip() else workers.list_workers(store, active_only)
    if active_only:
        rows = [w for w in rows if w.is_active]
    st.dataframe(utils.records_to_df(rows), use_container_width=True, hide_index=True)

    st.divider()

    selected = st.selectbox("Worker ID", options=["(none)"] + [str(w.id) for w in rows])
    if selected != "(none)":
        w = workers.get_worker(store, int(selected))
        if w is None:
            st.warning("Worker no longer exists.")
            return
        current = assignments.get_active_assignment(store, w.id)
        site = sites.get_site(store, current.site_id) if current else None
        st.write(
            f"Current site: **{site.name if site else 'none'}** | "
            f"Unsettled advances: **{utils.format_rupees(summary.total_unsettled_advances(store, w.id))}** | "
            f"Total paid: **{utils.format_rupees(summary.total_payments_for_worker(store, w.id))}**"
        )
        c1, c2, c3 = st.columns(3)
        with c1:
            if st.button("Edit"):
                st.session_state.edit_worker_id = w.id
                st.rerun()
        with c2:
            if st.button("Deactivate" if w.is_active else "Reactivate"):
                workers.set_worker_active(store, w.id, not w.is_active)
                st.rerun()
        with c3:
            confirm = st.checkbox("Confirm delete (removes payments, advances, attendance)", key="del_worker")
            if st.button("Delete", disabled=not confirm):
                workers.delete_worker(store, w.id)
                st.success("Worker deleted.")
                st.rerun()

    st.divider()

    if st.session_state.get("edit_worker_id"):
        existing = workers.get_worker(store, st.session_state.edit_worker_id)
        if existing:
            worker_form(store, existing)
        if st.button("Cancel edit"):
            st.session_state.edit_worker_id = None
            st.rerun()
    else:
        worker_form(store)


def site_form(store: db.Store, existing: Site | None = None):
    st.subheader(f"✏️ Edit Site (ID: {existing.id})" if existing else "➕ Add Site")

    col1, col2 = st.columns(2)
    with col1:
        name = st.text_input("Site name", value=existing.name if existing else "")
        address = st.text_input("Site address", value=existing.address if existing else "")
        client_name = st.text_input("Client name", value=existing.client_name if existing else "")
        client_contact = st.text_input("Client contact", value=existing.client_contact if existing else "")
    with col2:
        start_date = utils.format_date(st.date_input("Start date", value=_d(existing.start_date if existing else None)))
        has_end = st.checkbox("Has expected end date", value=bool(existing and existing.expected_end_date))
        expected_end = None
        if has_end:
            expected_end = utils.format_date(
                st.date_input("Expected end date", value=_d(existing.expected_end_date if existing else None))
            )
        status = st.selectbox(
            "Status", SITE_STATUSES, index=SITE_STATUSES.index(existing.status) if existing else 0
        )
        notes = st.text_area("Notes", value=(existing.notes or "") if existing else "")

    errors = utils.validate_site_inputs(name, start_date, expected_end, status)
    show_errors(errors)

    if st.button("Save site", type="primary", disabled=bool(errors)):
        site = Site(
            existing.id if existing else None, name.strip(), address.strip(), client_name.strip(),
            client_contact.strip(), start_date, expected_end, status, notes.strip() or None,
        )
        if existing:
            sites.update_site(store, site)
            st.success("Site updated.")
        else:
            sites.insert_site(store, site)
            st.success("Site added.")
        st.rerun()


def sites_page(store: db.Store):
    st.header("🏗️ Sites")

    with st.sidebar:
        st.subheader("Search & Filters")
        search = st.text_input("Search (name/address/client)")
        status_filter = st.selectbox("Status", ["All", *SITE_STATUSES])

    rows = sites.search_sites(store, search) if search.strip() else sites.list_sites(store)
    if status_filter != "All":
        rows = [s for s in rows if s.status == status_filter]
    st.dataframe(utils.records_to_df(rows), use_container_width=True, hide_index=True)

    st.divider()

    selected = st.selectbox("Site ID", options=["(none)"] + [str(s.id) for s in rows])
    if selected != "(none)":
        s = sites.get_site(store, int(selected))
        if s is None:
            st.warning("Site no longer exists.")
            return
        st.write(
            f"Workers on site: **{summary.worker_count_for_site(store, s.id)}** | "
            f"Paid for site: **{utils.format_rupees(summary.total_payments_for_site(store, s.id))}**"
        )
        assigned = assignments.get_workers_for_site(store, s.id)
        if assigned:
            st.dataframe(utils.records_to_df(assigned, ["id", "name", "role", "phone"]), hide_index=True)
        c1, c2 = st.columns(2)
        with c1:
            if st.button("Edit site"):
                st.session_state.edit_site_id = s.id
                st.rerun()
        with c2:
            confirm = st.checkbox("Confirm delete (payments are kept without a site)", key="del_site")
            if st.button("Delete site", disabled=not confirm):
                sites.delete_site(store, s.id)
                st.success("Site deleted.")
                st.rerun()

    st.divider()

    if st.session_state.get("edit_site_id"):
        existing = sites.get_site(store, st.session_state.edit_site_id)
        if existing:
            site_form(store, existing)
        if st.button("Cancel edit"):
            st.session_state.edit_site_id = None
            st.rerun()
    else:
        site_form(store)


def assignments_page(store: db.Store):
    st.header("📌 Assignments")

    w_opts = worker_options(store, active_only=True)
    s_opts = site_options(store)
    if not w_opts or not s_opts:
        st.info("Add at least one active worker and one site first.")
        return

    st.subheader("Assign workers to a site")
    chosen = st.multiselect("Workers", list(w_opts.keys()))
    site_label = st.selectbox("Site", list(s_opts.keys()))
    on = utils.format_date(st.date_input("Assignment date", value=date.today()))

    if st.button("Assign", type="primary", disabled=not chosen):
        requests = [assignments.AssignmentRequest(w_opts[label], s_opts[site_label], on) for label in chosen]
        results = assignments.bulk_assign(store, requests)
        failed = [r for r in results if not r.ok]
        if failed:
            for r in failed:
                st.error(f"Worker {r.request.worker_id}: {r.error}")
        st.success(f"{len(results) - len(failed)} of {len(results)} assignment(s) saved.")

    st.divider()

    st.subheader("End a worker's assignment")
    label = st.selectbox("Worker", list(w_opts.keys()), key="end_worker")
    end_on = utils.format_date(st.date_input("End date", value=date.today(), key="end_date"))
    if st.button("End assignment"):
        if assignments.deactivate_current_assignment(store, w_opts[label], end_on):
            st.success("Assignment ended.")
        else:
            st.info("Worker has no active assignment.")

    st.subheader("Assignment history")
    history = assignments.assignments_for_worker(store, w_opts[label])
    st.dataframe(utils.records_to_df(history), use_container_width=True, hide_index=True)


def payments_page(store: db.Store):
    st.header("💳 Payments")

    w_opts = worker_options(store)
    if not w_opts:
        st.info("No workers yet. Add a worker first.")
        return
    s_opts = {"(no site)": None, **site_options(store)}

    st.subheader("Record payment")
    c1, c2, c3 = st.columns(3)
    with c1:
        worker_label = st.selectbox("Worker", list(w_opts.keys()))
        site_label = st.selectbox("Site", list(s_opts.keys()))
        amount = st.text_input("Amount", value="0")
    with c2:
        pay_date = utils.format_date(st.date_input("Date", value=date.today()))
        mode = st.selectbox("Mode", PAYMENT_MODES)
        reference = st.text_input("Reference number")
    with c3:
        for_month = st.number_input("For month (0 = none)", min_value=0, max_value=12, value=date.today().month)
        for_year = st.number_input("For year (0 = none)", min_value=0, value=date.today().year)
        description = st.text_input("Description", value="Wages")
    notes = st.text_input("Notes")

    errors = utils.validate_payment_inputs(w_opts[worker_label], amount, pay_date, mode, for_month, for_year)
    if st.button("Save payment", type="primary"):
        if errors:
            show_errors(errors)
        else:
            payments.insert_payment(store, Payment(
                None, w_opts[worker_label], s_opts[site_label], pay_date, float(amount), description.strip(),
                mode, reference.strip() or None, int(for_month), int(for_year), notes.strip() or None,
            ))
            st.success("Payment recorded.")
            st.rerun()

    st.divider()

    st.subheader("Payment history")
    rows = payments.payments_for_worker(store, w_opts[worker_label])
    st.dataframe(utils.records_to_df(rows), use_container_width=True, hide_index=True)
    st.caption(f"Total paid: {utils.format_rupees(summary.total_payments_for_worker(store, w_opts[worker_label]))}")

    selected = st.selectbox("Delete payment ID", ["(none)"] + [str(p.id) for p in rows])
    if selected != "(none)" and st.button("Delete payment"):
        payments.delete_payment(store, int(selected))
        st.rerun()


def advances_page(store: db.Store):
    st.header("💵 Advances")

    w_opts = worker_options(store)
    if not w_opts:
        st.info("No workers yet. Add a worker first.")
        return

    st.subheader("Give advance")
    c1, c2 = st.columns(2)
    with c1:
        worker_label = st.selectbox("Worker", list(w_opts.keys()))
        amount = st.text_input("Amount", value="0")
        adv_date = utils.format_date(st.date_input("Date", value=date.today()))
    with c2:
        reason = st.text_input("Reason")
        mode = st.selectbox("Mode", PAYMENT_MODES)
        reference = st.text_input("Reference number")
    notes = st.text_input("Notes")

    worker_id = w_opts[worker_label]
    if st.button("Save advance", type="primary"):
        errors = utils.validate_advance_inputs(worker_id, amount, adv_date, reason, mode)
        if errors:
            show_errors(errors)
        else:
            advances.insert_advance(store, Advance(
                None, worker_id, float(amount), adv_date, reason.strip(), notes.strip() or None,
                mode, reference.strip() or None,
            ))
            st.success("Advance recorded.")
            st.rerun()

    st.divider()

    st.subheader("Unsettled advances")
    open_rows = advances.unsettled_advances_for_worker(store, worker_id)
    st.dataframe(utils.records_to_df(open_rows), use_container_width=True, hide_index=True)
    st.caption(f"Unsettled total: {utils.format_rupees(summary.total_unsettled_advances(store, worker_id))}")

    to_settle = st.multiselect("Settle advance IDs", [a.id for a in open_rows])
    if st.button("Mark settled", disabled=not to_settle):
        n = advances.settle_advances(store, to_settle)
        st.success(f"{n} advance(s) settled.")
        st.rerun()

    with st.expander("All advances for worker"):
        st.dataframe(utils.records_to_df(advances.advances_for_worker(store, worker_id)), hide_index=True)


def attendance_page(store: db.Store):
    st.header("🗓️ Attendance")

    w_opts = worker_options(store, active_only=True)
    s_opts = site_options(store)
    if not w_opts or not s_opts:
        st.info("Add at least one active worker and one site first.")
        return

    c1, c2, c3 = st.columns(3)
    with c1:
        worker_label = st.selectbox("Worker", list(w_opts.keys()))
        worker_id = w_opts[worker_label]
        current = assignments.get_active_assignment(store, worker_id)
        site_ids = list(s_opts.values())
        default_site = site_ids.index(current.site_id) if current and current.site_id in site_ids else 0
        site_label = st.selectbox("Site", list(s_opts.keys()), index=default_site)
    with c2:
        att_date = utils.format_date(st.date_input("Date", value=date.today()))
        status = st.selectbox("Status", ATTENDANCE_STATUSES)
    with c3:
        hours = st.text_input("Hours worked (hourly roles)")
        notes = st.text_input("Notes")

    if st.button("Save attendance", type="primary"):
        errors = utils.validate_attendance_inputs(worker_id, s_opts[site_label], att_date, status, hours)
        if errors:
            show_errors(errors)
        else:
            attendance.insert_attendance(store, Attendance(
                None, worker_id, s_opts[site_label], att_date, status,
                float(hours) if hours.strip() else None, notes.strip() or None,
            ))
            st.success("Attendance saved.")
            st.rerun()

    st.divider()

    st.subheader("Attendance on date")
    st.dataframe(utils.records_to_df(attendance.attendance_on(store, att_date)), use_container_width=True, hide_index=True)


def reports_page(store: db.Store):
    st.header("🧾 Reports")

    c1, c2 = st.columns(2)
    with c1:
        report_type = st.selectbox("Report", reports.REPORT_TYPES, format_func=lambda t: reports.REPORT_TITLES[t])
        export_format = st.selectbox("Format", ["PDF", "EXCEL", "CSV"])
        use_dates = st.checkbox("Filter by date range")
        start = end = None
        if use_dates:
            start = utils.format_date(st.date_input("From", value=date.today().replace(day=1)))
            end = utils.format_date(st.date_input("To", value=date.today()))
    with c2:
        w_opts = {"(all workers)": None, **worker_options(store)}
        s_opts = {"(all sites)": None, **site_options(store)}
        worker_id = w_opts[st.selectbox("Worker", list(w_opts.keys()))]
        site_id = s_opts[st.selectbox("Site", list(s_opts.keys()))]

    report_filter = reports.ReportFilter(report_type, start, end, worker_id, site_id, export_format)
    errors = reports.validate_report_filter(report_filter)
    show_errors(errors)

    if not errors:
        preview = reports.build_report(store, report_filter)
        st.dataframe(pd.DataFrame(preview.document.rows, columns=preview.document.columns),
                     use_container_width=True, hide_index=True)
        st.caption(preview.document.summary)

    if st.button("Generate file", type="primary", disabled=bool(errors)):
        future = reports.generate_report_async(store, report_filter, config.Config.REPORTS_DIR, get_executor())
        with st.spinner("Generating report..."):
            try:
                path = future.result()
            except (ExportError, ValueError, sqlite3.Error) as e:
                st.error(f"Error generating report: {e}")
                return
        st.success(f"Report saved to {path}")
        st.download_button("Download report", data=path.read_bytes(), file_name=path.name)


def settings_page(store: db.Store):
    st.header("⚙️ Settings")

    st.write(f"Database: `{store.path}`")
    st.write(f"Reports folder: `{config.Config.REPORTS_DIR}`")

    st.divider()

    st.subheader("Sample data")
    st.caption("Insert sample workers, sites, payments, advances and attendance (adds new rows each run).")
    if st.button("Insert sample data"):
        sample_data.insert_sample_data(store)
        st.success("Sample data inserted.")
        st.rerun()


PAGES = {
    "Dashboard": dashboard_page,
    "Workers": workers_page,
    "Sites": sites_page,
    "Assignments": assignments_page,
    "Payments": payments_page,
    "Advances": advances_page,
    "Attendance": attendance_page,
    "Reports": reports_page,
    "Settings": settings_page,
}


def main_app(store: db.Store):
    st.sidebar.title("🏗️ CrewLedger")

    pages = list(PAGES.keys())
    if "page" not in st.session_state:
        st.session_state.page = "Dashboard"
    st.session_state.page = st.sidebar.radio("Navigate", pages, index=pages.index(st.session_state.page))

    PAGES[st.session_state.page](store)


# --------- App entry ---------

def run():
    store = get_store()
    main_app(store)


if __name__ == "__main__":
    run()
