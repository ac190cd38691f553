import datetime

import pytest

from biztrack import reporting
from biztrack.entities import Account, PaymentMethod, Product, Role, Transaction, TransactionType
from biztrack.reporting import TimeWindow

# Wednesday; the week started on Sunday 11 Oct
NOW = datetime.datetime(2026, 10, 14, 12, 0)


def _ts(*args):
    return int(datetime.datetime(*args).timestamp() * 1000)


def _txn(tid, kind, amount, when=(2026, 10, 14, 9, 0), **kw):
    return Transaction(
        id=tid,
        business_name="Analytical Diner",
        type=TransactionType(kind),
        amount=amount,
        timestamp=_ts(*when),
        **kw,
    )


def _product(pid, buy, sell, stock=10, min_stock=5, name=None):
    return Product(
        id=pid, business_name="Analytical Diner", name=name or pid, buy_price=buy, sell_price=sell,
        stock_count=stock, min_stock=min_stock,
    )


def _account(role):
    return Account(id="u1", full_name="Ada", phone_number="", email="a@b.c", business_name="Analytical Diner", role=role)


def test_unlinked_sales_use_flat_margin():
    txns = [_txn("s1", "SALE", 100), _txn("s2", "SALE", 50), _txn("e1", "EXPENSE", 30)]
    assert reporting.total_revenue(txns, TimeWindow.TODAY, NOW) == 150
    assert reporting.total_expenses(txns, TimeWindow.TODAY, NOW) == 30
    assert reporting.estimated_profit(txns, [], TimeWindow.TODAY, NOW) == pytest.approx(30)
    assert reporting.net_profit(txns, [], TimeWindow.TODAY, NOW) == pytest.approx(0)


def test_linked_sale_uses_catalogue_margin():
    products = [_product("bread", buy=10, sell=15)]
    sale = _txn("s1", "SALE", 45, item_id="bread", quantity=3)
    assert reporting.line_profit(sale, products) == 15
    dangling = _txn("s2", "SALE", 45, item_id="gone", quantity=3)
    assert reporting.line_profit(dangling, products) == pytest.approx(9)


def test_today_window_excludes_yesterday_and_tomorrow():
    txns = [
        _txn("y", "SALE", 10, when=(2026, 10, 13, 23, 59)),
        _txn("t", "SALE", 20, when=(2026, 10, 14, 0, 0)),
        _txn("n", "SALE", 40, when=(2026, 10, 15, 0, 0)),
    ]
    assert [t.id for t in reporting.filter_window(txns, TimeWindow.TODAY, NOW)] == ["t"]
    assert reporting.in_window(txns[0], TimeWindow.WEEK, NOW)


def test_week_starts_on_sunday():
    start, end = reporting.window_bounds(TimeWindow.WEEK, NOW)
    assert start == datetime.datetime(2026, 10, 11)
    assert end == datetime.datetime(2026, 10, 18)
    saturday = _txn("sat", "SALE", 5, when=(2026, 10, 10, 18, 0))
    assert not reporting.in_window(saturday, TimeWindow.WEEK, NOW)


def test_week_window_on_a_sunday_starts_that_day():
    sunday = datetime.datetime(2026, 10, 18, 8, 0)
    start, _ = reporting.window_bounds(TimeWindow.WEEK, sunday)
    assert start == datetime.datetime(2026, 10, 18)


def test_month_window_rolls_over_december():
    start, end = reporting.window_bounds(TimeWindow.MONTH, datetime.datetime(2026, 12, 31, 23, 0))
    assert start == datetime.datetime(2026, 12, 1)
    assert end == datetime.datetime(2027, 1, 1)


def test_all_time_keeps_everything():
    txns = [_txn("old", "SALE", 5, when=(2001, 1, 1, 0, 0)), _txn("t", "SALE", 5)]
    assert reporting.total_revenue(txns, TimeWindow.ALL_TIME, NOW) == 10


def test_payment_breakdown_counts_sales_only():
    txns = [
        _txn("s1", "SALE", 100, method=PaymentMethod.CASH),
        _txn("s2", "SALE", 60, method=PaymentMethod.MTN_MOMO),
        _txn("e1", "EXPENSE", 30, method=PaymentMethod.CASH),
        _txn("old", "SALE", 99, when=(2026, 10, 1, 9, 0), method=PaymentMethod.AIRTEL_MONEY),
    ]
    assert reporting.payment_breakdown(txns, now=NOW) == {
        PaymentMethod.CASH: 100,
        PaymentMethod.MTN_MOMO: 60,
        PaymentMethod.AIRTEL_MONEY: 0,
    }


def test_low_stock_keeps_catalogue_order():
    products = [_product("a", 1, 2, stock=5, min_stock=5), _product("b", 1, 2, stock=6), _product("c", 1, 2, stock=0)]
    assert [p.id for p in reporting.low_stock(products)] == ["a", "c"]


def test_popularity_ranking():
    txns = [_txn(f"b{i}", "SALE", 10, item_name="Bread") for i in range(5)]
    txns += [_txn(f"m{i}", "SALE", 10, item_name="Milk") for i in range(3)]
    txns.append(_txn("e", "EXPENSE", 10, item_name="Rent"))
    assert reporting.popular_items(txns, now=NOW) == [("Bread", 5), ("Milk", 3)]


def test_popularity_window_and_ties():
    txns = [
        _txn("1", "SALE", 10, item_name="Eggs"),
        _txn("2", "SALE", 10, item_name="Milk"),
        _txn("3", "SALE", 10, item_name="Soap"),
        _txn("4", "SALE", 10, item_name="Sugar"),
        _txn("5", "SALE", 10, item_name="Bread", when=(2026, 9, 1, 9, 0)),
        _txn("6", "SALE", 10, item_name="Bread", when=(2026, 9, 2, 9, 0)),
    ]
    assert reporting.popular_items(txns, now=NOW) == [("Eggs", 1), ("Milk", 1), ("Soap", 1)]


def test_inventory_value_at_cost():
    products = [_product("a", buy=10, sell=99, stock=3), _product("b", buy=2.5, sell=4, stock=4)]
    assert reporting.inventory_value(products) == 40


def test_summarize_week():
    products = [_product("bread", buy=10, sell=15)]
    txns = [
        _txn("s1", "SALE", 45, item_id="bread", quantity=3, method=PaymentMethod.AIRTEL_MONEY),
        _txn("s2", "SALE", 100, when=(2026, 10, 12, 9, 0)),
        _txn("e1", "EXPENSE", 5, when=(2026, 10, 11, 9, 0)),
        _txn("old", "SALE", 1000, when=(2026, 10, 3, 9, 0)),
    ]
    summary = reporting.summarize(txns, products, TimeWindow.WEEK, NOW)
    assert summary.revenue == 145
    assert summary.expenses == 5
    assert summary.gross_profit == pytest.approx(35)
    assert summary.net_profit == pytest.approx(30)
    assert summary.method_breakdown[PaymentMethod.AIRTEL_MONEY] == 45
    assert summary.start == datetime.datetime(2026, 10, 11)


def test_trailing_report():
    txns = [
        _txn("s1", "SALE", 100, item_name="Bread"),
        _txn("e1", "EXPENSE", 40),
        _txn("old", "SALE", 500, item_name="Milk", when=(2026, 8, 1, 9, 0)),
    ]
    report = reporting.trailing_report(txns, now=NOW)
    assert (report.sales, report.expenses, report.cash_flow) == (100, 40, 60)
    assert report.popular == [("Bread", 1)]


def test_dashboard_for_management_shows_profit_and_alerts():
    products = [_product("bread", buy=10, sell=15, stock=2)]
    txns = [_txn("s1", "SALE", 30, item_id="bread", quantity=2), _txn("e1", "EXPENSE", 4)]
    view = reporting.dashboard_for(_account(Role.MANAGER), txns, products, now=NOW)
    assert view.is_management
    assert view.headline == pytest.approx(6)
    assert [p.id for p in view.low_stock] == ["bread"]
    assert [t.id for t in view.recent] == ["s1", "e1"]


def test_dashboard_for_sales_person_shows_sales_only():
    products = [_product("bread", buy=10, sell=15, stock=2)]
    txns = [_txn("s1", "SALE", 30, item_id="bread", quantity=2), _txn("e1", "EXPENSE", 4)]
    view = reporting.dashboard_for(_account(Role.SALES_PERSON), txns, products, now=NOW)
    assert not view.is_management
    assert view.headline == 30
    assert view.expenses_today is None
    assert view.low_stock == []


@pytest.mark.parametrize("amount, text", [(1234, "K 1,234"), (12.5, "K 12.50"), (0, "K 0")])
def test_format_amount(amount, text):
    assert reporting.format_amount(amount) == text
