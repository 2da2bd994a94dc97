"""Tests for sales reports."""

from cafe_pos.models import Order
from cafe_pos.reports import SalesReport, top_products, total_revenue_cents, units_sold
from cafe_pos.store import OFFLINE_ORDERS, ORDERS

from .fixtures import ESPRESSO, LAST_CROISSANT, LATTE, WORKER, line, make_store, run


def _order(order_id: str, date: str, *items, final: int = 1000) -> Order:
    return Order(
        id=order_id,
        items=tuple(items),
        subtotal_cents=final,
        points_redeemed=0,
        final_amount_cents=final,
        points_earned=0,
        date=date,
        served_by=WORKER.id,
    )


ORDER_A = _order("order-a", "2024-03-01T09:30:00Z", line(ESPRESSO, 2), final=2000)
ORDER_B = _order("order-b", "2024-03-02T08:00:00Z", line(LATTE, 1), line(ESPRESSO, 1), final=2550)
ORDER_C = _order("order-c", "2024-03-01T09:30:00.500Z", line(LAST_CROISSANT, 3), final=2400)


class TestAggregates:
    """Tests for the pure aggregate helpers."""

    def test_total_revenue(self) -> None:
        assert total_revenue_cents([ORDER_A, ORDER_B, ORDER_C]) == 6950

    def test_units_sold(self) -> None:
        assert units_sold([ORDER_A, ORDER_B]) == {"Espresso": 3, "Latte": 1}

    def test_top_products_ranked(self) -> None:
        assert top_products([ORDER_A, ORDER_B, ORDER_C], limit=2) == [
            ("Croissant", 3),
            ("Espresso", 3),
        ]

    def test_top_products_empty(self) -> None:
        assert top_products([]) == []


class TestSalesReport:
    """Tests for SalesReport over a store."""

    def test_history_newest_first(self) -> None:
        store = make_store(**{ORDERS: [o.to_record() for o in (ORDER_A, ORDER_B, ORDER_C)]})
        history = run(SalesReport(store).order_history())
        assert [o.id for o in history] == ["order-b", "order-c", "order-a"]

    def test_history_excludes_pending(self) -> None:
        store = make_store(**{ORDERS: [ORDER_A.to_record()], OFFLINE_ORDERS: [ORDER_B.to_record()]})
        assert [o.id for o in run(SalesReport(store).order_history())] == ["order-a"]

    def test_dashboard_summary(self) -> None:
        store = make_store(
            **{
                ORDERS: [ORDER_A.to_record(), ORDER_C.to_record()],
                OFFLINE_ORDERS: [ORDER_B.to_record()],
            }
        )
        summary = run(SalesReport(store, top_limit=1).dashboard_summary())
        assert summary.total_revenue_cents == 4400
        assert summary.order_count == 2
        assert summary.product_count == 3
        assert summary.pending_count == 1
        assert summary.top_products == [("Croissant", 3)]

    def test_empty_store(self) -> None:
        summary = run(SalesReport(make_store()).dashboard_summary())
        assert summary.total_revenue_cents == 0
        assert summary.order_count == 0
        assert summary.top_products == []
