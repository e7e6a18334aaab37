import advances
import assignments
import payments
import sample_data
import sites
import summary
import workers
from live import LiveQuery
from models import Advance, Payment


def test_unsettled_advances_total(store, make_worker):
    w5 = make_worker()
    advances.insert_advance(store, Advance(None, w5, 1000.0, "2024-01-05", "Medical", None, "CASH"))
    advances.insert_advance(store, Advance(None, w5, 200.0, "2024-01-06", "Travel", None, "CASH", None, True))
    assert summary.total_unsettled_advances(store, w5) == 1000


def test_unsettled_advances_zero_when_none(store, make_worker):
    assert summary.total_unsettled_advances(store, make_worker()) == 0


def test_active_counts(store, make_worker, make_site):
    make_worker("A")
    make_worker("B", active=False)
    make_site("S1", status="ACTIVE")
    make_site("S2", status="ON_HOLD")
    assert summary.active_worker_count(store) == 1
    assert summary.active_site_count(store) == 1


def test_worker_count_for_site(store, make_worker, make_site):
    w1, w2 = make_worker("A"), make_worker("B")
    s1, s2 = make_site("S1"), make_site("S2")
    assignments.assign_worker_to_site(store, w1, s1, "2024-01-01")
    assignments.assign_worker_to_site(store, w2, s1, "2024-01-01")
    assignments.assign_worker_to_site(store, w2, s2, "2024-02-01")
    assert summary.worker_count_for_site(store, s1) == 1
    assert summary.worker_count_for_site(store, s2) == 1


def test_payment_totals(store, make_worker, make_site):
    w1, s1 = make_worker(), make_site()
    payments.insert_payment(store, Payment(None, w1, s1, "2024-01-10", 500.0, "Wages", "CASH", None, 1, 2024))
    payments.insert_payment(store, Payment(None, w1, None, "2024-02-10", 250.0, "Wages", "CASH", None, 2, 2024))
    assert summary.total_payments_for_worker(store, w1) == 750
    assert summary.total_payments_for_site(store, s1) == 500
    assert summary.total_payments_for_month(store, 2, 2024) == 250


def test_dashboard_counts(store, make_worker, make_site):
    w1 = make_worker()
    make_site()
    advances.insert_advance(store, Advance(None, w1, 300.0, "2024-01-05", "Medical", None, "CASH"))
    assert summary.dashboard_counts(store) == {
        "active_workers": 1,
        "active_sites": 1,
        "unsettled_advances": 300.0,
        "total_paid": 0,
    }


def test_aggregates_reflect_latest_writes(store, make_worker):
    wid = make_worker()
    assert summary.active_worker_count(store) == 1
    workers.set_worker_active(store, wid, False)
    assert summary.active_worker_count(store) == 0


def test_live_query_pushes_new_values(store, make_worker):
    query = summary.live_active_worker_count(store)
    seen = []
    stop = query.observe(seen.append)

    make_worker("A")
    make_worker("B")
    assert seen == [1, 2]
    assert query.value() == 2

    stop()
    make_worker("C")
    assert seen == [1, 2]
    assert query.value() == 3


def test_live_query_ignores_other_tables(store, make_worker, make_site):
    seen = []
    summary.live_active_site_count(store).observe(seen.append)
    make_worker()
    assert seen == []
    sid = make_site()
    sites.set_site_status(store, sid, "COMPLETED")
    assert seen == [1, 0]


def test_live_unsettled_advances_follow_settlement(store, make_worker):
    wid = make_worker()
    aid = advances.insert_advance(store, Advance(None, wid, 400.0, "2024-01-05", "Medical", None, "CASH"))
    seen = []
    summary.live_unsettled_advances(store, wid).observe(seen.append)
    advances.settle_advances(store, [aid])
    assert seen == [0]


def test_live_worker_count_for_site(store, make_worker, make_site):
    wid, sid = make_worker(), make_site()
    seen = []
    summary.live_worker_count_for_site(store, sid).observe(seen.append)
    assignments.assign_worker_to_site(store, wid, sid, "2024-01-01")
    assignments.deactivate_current_assignment(store, wid, "2024-01-31")
    assert seen == [1, 0]


def test_each_observer_unsubscribes_independently(store, make_worker):
    query = LiveQuery(store, ("workers",), summary.active_worker_count)
    first, second = [], []
    stop_first = query.observe(first.append)
    query.observe(second.append)

    make_worker("A")
    stop_first()
    stop_first()
    make_worker("B")

    assert first == [1]
    assert second == [1, 2]


def test_sample_data_dashboard(store):
    sample_data.insert_sample_data(store)
    assert summary.dashboard_counts(store) == {
        "active_workers": 2,
        "active_sites": 1,
        "unsettled_advances": 2000.0,
        "total_paid": 24000.0,
    }
