import logging

from ccube.services.discount_engine import (
    eligibility_progress,
    evaluate_buy_x_get_y,
    evaluate_rule,
    format_discount_description,
    progress_threshold,
    required_bundle_size,
    select_best_discount,
)
from helpers import make_line, make_product, make_rule


# ---- evaluator ----


def test_single_line_bundle_gives_one_free():
    p1 = make_product("p1", price=100)
    cart = [make_line(p1, quantity=3)]
    rule = make_rule(buy=2, free=1, products=["p1"])

    result = evaluate_buy_x_get_y(cart, rule)

    assert result.savings == 100
    assert len(result.free_items) == 1
    assert result.free_items[0].free_quantity == 1
    assert result.discounted_items[0].paid_quantity == 2
    assert result.discounted_items[0].free_quantity == 1
    info = result.discount_info
    assert info.sets_eligible == 1
    assert info.total_free_items == 1
    assert info.total_applicable_items == 3
    assert required_bundle_size(rule) == 3


def test_cheapest_lines_become_free():
    prices = {"p5": 120, "p1": 80, "p4": 110, "p2": 90, "p3": 100}
    cart = [make_line(make_product(pid, price=price)) for pid, price in prices.items()]
    rule = make_rule(buy=3, free=2, products=list(prices))

    result = evaluate_buy_x_get_y(cart, rule)

    assert result.savings == 170
    assert [fi.item.product.id for fi in result.free_items] == ["p1", "p2"]
    assert len(result.discounted_items) == 5
    paid = {di.item.product.id: di.paid_quantity for di in result.discounted_items}
    assert paid == {"p1": 0, "p2": 0, "p3": 1, "p4": 1, "p5": 1}


def test_partial_bundle_grants_nothing():
    cart = [make_line(make_product("p1", price=100), quantity=2)]
    result = evaluate_buy_x_get_y(cart, make_rule(buy=2, free=1))

    assert result.savings == 0
    assert result.free_items == []
    assert result.discounted_items == []
    assert result.discount_info is None


def test_multiple_sets():
    cart = [make_line(make_product("p1", price=10), quantity=7)]
    result = evaluate_buy_x_get_y(cart, make_rule(buy=2, free=1))

    assert result.discount_info.sets_eligible == 2
    assert result.discount_info.total_free_items == 2
    assert result.savings == 20


def test_free_units_spill_into_next_cheapest_line():
    cheap = make_product("a", price=5)
    pricey = make_product("b", price=8)
    cart = [make_line(pricey, quantity=5), make_line(cheap, quantity=1)]
    rule = make_rule(buy=2, free=2, products=["a", "b"])

    result = evaluate_buy_x_get_y(cart, rule)

    assert [(fi.item.product.id, fi.free_quantity) for fi in result.free_items] == [("a", 1), ("b", 1)]
    assert result.savings == 13
    assert [di.item.product.id for di in result.discounted_items] == ["a", "b"]
    assert result.discounted_items[1].paid_quantity == 4


def test_no_pricier_unit_free_while_cheaper_unit_paid():
    products = [make_product(f"p{i}", price=price) for i, price in enumerate([30, 10, 20, 40])]
    cart = [make_line(p, quantity=2) for p in products]
    rule = make_rule(buy=1, free=1, products=[p.id for p in products])

    result = evaluate_buy_x_get_y(cart, rule)

    unit = {p.id: p.price.amount for p in products}
    free_prices = [unit[di.item.product.id] for di in result.discounted_items if di.free_quantity > 0]
    paid_prices = [unit[di.item.product.id] for di in result.discounted_items if di.paid_quantity > 0]
    assert max(free_prices) <= min(paid_prices)
    assert result.savings == 2 * 10 + 2 * 20


def test_equal_prices_keep_cart_order():
    first = make_product("first", price=50)
    second = make_product("second", price=50)
    cart = [make_line(first), make_line(second), make_line(make_product("third", price=60))]
    rule = make_rule(buy=2, free=1, products=["first", "second", "third"])

    result = evaluate_buy_x_get_y(cart, rule)

    assert [fi.item.product.id for fi in result.free_items] == ["first"]


def test_size_price_used_for_variant_lines():
    bag = make_product("crob02", price={"small": 150, "large": 200})
    cart = [
        make_line(bag, quantity=1, size="Large"),
        make_line(bag, quantity=2, size="Small"),
    ]
    result = evaluate_buy_x_get_y(cart, make_rule(buy=2, free=1, products=["crob02"]))

    assert result.savings == 150
    assert result.free_items[0].item.selected_size == "Small"


def test_lines_outside_rule_are_ignored():
    cart = [
        make_line(make_product("p1", price=100), quantity=3),
        make_line(make_product("other", price=1), quantity=5),
    ]
    result = evaluate_buy_x_get_y(cart, make_rule(buy=2, free=1, products=["p1"]))

    assert result.savings == 100
    assert {di.item.product.id for di in result.discounted_items} == {"p1"}


def test_no_applicable_lines_means_zero_result():
    cart = [make_line(make_product("other", price=100), quantity=10)]

    for items in (cart, []):
        result = evaluate_buy_x_get_y(items, make_rule(products=["p1"]))
        assert result.savings == 0
        assert result.free_items == []
        assert result.discounted_items == []


def test_custom_price_resolver_is_used():
    cart = [make_line(make_product("p1", price=100), quantity=3)]
    result = evaluate_buy_x_get_y(cart, make_rule(), price_resolver=lambda product, size: 7.5)

    assert result.savings == 7.5


def test_unknown_rule_type_is_skipped_with_warning(caplog):
    cart = [make_line(make_product("p1", price=100), quantity=3)]
    rule = make_rule(type="percentOff")

    with caplog.at_level(logging.WARNING, logger="ccube.services.discount_engine"):
        assert evaluate_rule(cart, rule) is None

    assert "Unknown discount type: percentOff" in caplog.text


# ---- selector ----


def test_higher_savings_wins():
    cart = [make_line(make_product("p1", price=100), quantity=6)]
    one_free = make_rule("r1", buy=5, free=1)
    two_free = make_rule("r2", buy=2, free=1)

    summary = select_best_discount(cart, [one_free, two_free])

    assert summary.total_savings == 200
    assert len(summary.applied_discounts) == 1
    assert summary.applied_discounts[0].rule.id == "r2"
    assert summary.has_discounts


def test_empty_cart_returns_zero_summary():
    summary = select_best_discount([], [make_rule()])

    assert summary.total_savings == 0
    assert summary.applied_discounts == []
    assert summary.free_items == []
    assert summary.discounted_items == []
    assert not summary.has_discounts


def test_savings_tie_broken_by_free_item_count():
    cheap = make_product("a", price=50)
    pricey = make_product("b", price=100)
    cart = [make_line(cheap, quantity=4), make_line(pricey, quantity=2)]
    one_pricey_free = make_rule("y", buy=1, free=1, products=["b"])
    two_cheap_free = make_rule("x", buy=2, free=2, products=["a"])

    summary = select_best_discount(cart, [one_pricey_free, two_cheap_free])

    assert summary.total_savings == 100
    assert summary.applied_discounts[0].rule.id == "x"


def test_full_tie_broken_by_larger_buy_requirement():
    cart = [make_line(make_product("b", price=100), quantity=4)]
    small = make_rule("m", buy=1, free=1, products=["b"])
    large = make_rule("n", buy=2, free=2, products=["b"])

    summary = select_best_discount(cart, [small, large])

    assert summary.total_savings == 200
    assert summary.applied_discounts[0].rule.id == "n"


def test_identical_rules_first_one_wins():
    cart = [make_line(make_product("p1", price=100), quantity=3)]
    summary = select_best_discount(cart, [make_rule("first"), make_rule("second")])

    assert summary.applied_discounts[0].rule.id == "first"


def test_only_one_discount_ever_applied():
    cart = [make_line(make_product("p1", price=10), quantity=12)]
    rules = [make_rule("a", buy=1, free=1), make_rule("b", buy=2, free=1), make_rule("c", buy=3, free=3)]

    summary = select_best_discount(cart, rules)

    assert len(summary.applied_discounts) == 1
    assert summary.total_savings == summary.applied_discounts[0].result.savings
    assert len(summary.free_items) == len(summary.applied_discounts[0].result.free_items)


def test_inactive_and_unknown_rules_are_not_applied(caplog):
    cart = [make_line(make_product("p1", price=100), quantity=4)]
    rules = [
        make_rule("off", buy=1, free=1, active=False),
        make_rule("weird", buy=1, free=1, type="bundlePrice"),
        make_rule("ok", buy=3, free=1),
    ]

    with caplog.at_level(logging.WARNING):
        summary = select_best_discount(cart, rules)

    assert summary.applied_discounts[0].rule.id == "ok"
    assert summary.total_savings == 100
    assert "bundlePrice" in caplog.text


def test_zero_priced_items_do_not_count_as_a_discount():
    cart = [make_line(make_product("p1", price="not a price"), quantity=3)]
    summary = select_best_discount(cart, [make_rule()])

    assert summary.total_savings == 0
    assert summary.applied_discounts == []


def test_injected_logger_receives_decisions(caplog):
    hook = logging.getLogger("tests.pricing_hook")
    cart = [make_line(make_product("p1", price=100), quantity=3)]

    with caplog.at_level(logging.INFO, logger="tests.pricing_hook"):
        select_best_discount(cart, [make_rule()], logger=hook)

    assert any(r.name == "tests.pricing_hook" for r in caplog.records)


def test_summary_product_helpers():
    a = make_product("a", price=10)
    b = make_product("b", price=20)
    cart = [make_line(a, quantity=2), make_line(b, quantity=1)]
    summary = select_best_discount(cart, [make_rule(buy=2, free=1, products=["a", "b"])])

    assert [fi.free_quantity for fi in summary.free_items_for_product("a")] == [1]
    assert summary.free_items_for_product("b") == []
    assert summary.discounted_items_for_product("b")[0].paid_quantity == 1


# ---- progress reporter ----


def test_progress_hint_can_report_eligible_before_discount_applies():
    """
    The hint uses the buy quantity alone while the engine needs a full
    bundle: with buy 2 / free 1 and two units in the cart, the hint says
    "eligible" but nothing is granted yet.
    """
    cart = [make_line(make_product("p1", price=100), quantity=2)]
    rule = make_rule(buy=2, free=1)

    [progress] = eligibility_progress(cart, [rule])

    assert progress_threshold(rule) < required_bundle_size(rule)
    assert progress.is_eligible is True
    assert progress.items_needed == 0
    assert progress.potential_savings == 0
    assert select_best_discount(cart, [rule]).total_savings == 0


def test_progress_items_needed():
    cart = [make_line(make_product("p1", price=100), quantity=1)]
    [progress] = eligibility_progress(cart, [make_rule(buy=3, free=1)])

    assert progress.is_eligible is False
    assert progress.items_needed == 2
    assert progress.current_quantity == 1
    assert progress.potential_savings == 0
    assert progress.description == "Buy 3, Get 1 Free!"


def test_progress_sorted_by_potential_savings():
    cheap = make_product("a", price=10)
    pricey = make_product("b", price=100)
    cart = [make_line(cheap, quantity=3), make_line(pricey, quantity=3)]
    rules = [
        make_rule("cheap", buy=2, free=1, products=["a"]),
        make_rule("far", buy=10, free=1, products=["a"]),
        make_rule("pricey", buy=2, free=1, products=["b"]),
    ]

    report = eligibility_progress(cart, rules)

    assert [p.rule.id for p in report] == ["pricey", "cheap", "far"]
    assert [p.potential_savings for p in report] == [100, 10, 0]


def test_progress_skips_inactive_unknown_and_untouched_rules():
    cart = [make_line(make_product("p1", price=100), quantity=3)]
    rules = [
        make_rule("off", active=False),
        make_rule("weird", type="percentOff"),
        make_rule("elsewhere", products=["p9"]),
    ]

    assert eligibility_progress(cart, rules) == []


def test_format_discount_description():
    assert format_discount_description(make_rule(buy=3, free=1)) == "Buy 3, Get 1 Free!"
    assert format_discount_description(make_rule(type="percentOff")) == "Special Offer"
