# ccube/services/discount_engine.py
"""
Promotion engine for carts.

Every function here is pure: it takes a snapshot of cart lines and rules and
returns derived values. Nothing is persisted and nothing raises on bad input;
malformed data degrades to "no discount".

Two thresholds live side by side on purpose:
  - `required_bundle_size` (buy + free) decides whether a rule is granted;
  - `progress_threshold` (buy only) decides when the upsell hint calls a
    rule "eligible".
The hint can therefore announce a deal one bundle-fill before the engine
grants it.
"""

import logging
from collections.abc import Callable, Iterable, Sequence

from ccube.core.pricing import PriceResolver, resolve_unit_price
from ccube.schemas.cart import CartLineItem
from ccube.schemas.discount import (
    BUY_X_GET_Y,
    AppliedDiscount,
    CartDiscountSummary,
    DiscountedItem,
    DiscountInfo,
    EligibilityProgress,
    EligibilityResult,
    FreeItem,
    PromotionRule,
)

log = logging.getLogger(__name__)


def required_bundle_size(rule: PromotionRule) -> int:
    """Units needed in the cart before a buy-X-get-Y rule grants anything."""
    return rule.buy_quantity + rule.free_quantity


def progress_threshold(rule: PromotionRule) -> int:
    """Units needed before the upsell hint reports the rule as eligible."""
    return rule.buy_quantity


def applicable_lines(items: Iterable[CartLineItem], rule: PromotionRule) -> list[CartLineItem]:
    return [item for item in items if rule.applies_to(item.product.id)]


def format_discount_description(rule: PromotionRule) -> str:
    if rule.type == BUY_X_GET_Y:
        return f"Buy {rule.buy_quantity}, Get {rule.free_quantity} Free!"
    return "Special Offer"


def evaluate_buy_x_get_y(
    items: Sequence[CartLineItem],
    rule: PromotionRule,
    price_resolver: PriceResolver = resolve_unit_price,
    logger: logging.Logger | None = None,
) -> EligibilityResult:
    """
    Evaluate a "buy X get Y free" rule against a cart.

    Steps:
      1. Keep lines whose product is covered by the rule.
      2. Require at least one complete bundle (buy + free units).
      3. Grant `free_quantity` units per complete bundle.
      4. Give away the cheapest units first, walking lines by unit price
         (stable: equal prices keep cart order).

    Every applicable line appears in `discounted_items`: lines that received
    free units first (in assignment order), then the rest in cart order.
    """
    logger = logger or log

    applicable = applicable_lines(items, rule)
    if not applicable:
        return EligibilityResult()

    total_quantity = sum(item.quantity for item in applicable)
    bundle_size = required_bundle_size(rule)

    if total_quantity < bundle_size:
        logger.debug(
            f"Discount '{rule.name or rule.id}' requires {bundle_size} items "
            f"({rule.buy_quantity} buy + {rule.free_quantity} free), "
            f"cart has {total_quantity} applicable items"
        )
        return EligibilityResult()

    sets_eligible = total_quantity // bundle_size
    free_count = sets_eligible * rule.free_quantity
    if free_count == 0:
        return EligibilityResult()

    priced = [
        (index, item, price_resolver(item.product, item.selected_size))
        for index, item in enumerate(applicable)
    ]
    cheapest_first = sorted(priced, key=lambda entry: entry[2])

    remaining = free_count
    free_items: list[FreeItem] = []
    discounted_items: list[DiscountedItem] = []
    covered: set[int] = set()

    for index, item, unit_price in cheapest_first:
        if remaining <= 0:
            break

        free_qty = min(remaining, item.quantity)
        free_items.append(
            FreeItem(
                item=item,
                free_quantity=free_qty,
                unit_price=unit_price,
                savings=unit_price * free_qty,
            )
        )
        discounted_items.append(
            DiscountedItem(
                item=item,
                original_quantity=item.quantity,
                paid_quantity=item.quantity - free_qty,
                free_quantity=free_qty,
            )
        )
        covered.add(index)
        remaining -= free_qty

    for index, item in enumerate(applicable):
        if index not in covered:
            discounted_items.append(
                DiscountedItem(
                    item=item,
                    original_quantity=item.quantity,
                    paid_quantity=item.quantity,
                    free_quantity=0,
                )
            )

    savings = sum(fi.savings for fi in free_items)

    logger.debug(
        f"Discount '{rule.name or rule.id}': {total_quantity} applicable items, "
        f"{sets_eligible} set(s), {free_count} free, savings {savings:.2f}"
    )

    return EligibilityResult(
        savings=savings,
        free_items=free_items,
        discounted_items=discounted_items,
        discount_info=DiscountInfo(
            type=rule.type,
            buy_quantity=rule.buy_quantity,
            free_quantity=rule.free_quantity,
            sets_eligible=sets_eligible,
            total_free_items=free_count,
            total_applicable_items=total_quantity,
        ),
    )


RuleEvaluator = Callable[..., EligibilityResult]

RULE_EVALUATORS: dict[str, RuleEvaluator] = {
    BUY_X_GET_Y: evaluate_buy_x_get_y,
}


def evaluate_rule(
    items: Sequence[CartLineItem],
    rule: PromotionRule,
    price_resolver: PriceResolver = resolve_unit_price,
    logger: logging.Logger | None = None,
) -> EligibilityResult | None:
    """
    Dispatch on the rule type. Unknown types are logged and yield None.
    """
    logger = logger or log

    evaluator = RULE_EVALUATORS.get(rule.type)
    if evaluator is None:
        logger.warning(f"Unknown discount type: {rule.type} (rule {rule.id})")
        return None
    return evaluator(items, rule, price_resolver, logger)


def _ranking(candidate: AppliedDiscount) -> tuple[float, int, int]:
    # savings, then free units, then the larger buy requirement
    return (
        candidate.result.savings,
        candidate.result.total_free_items,
        candidate.rule.buy_quantity,
    )


def select_best_discount(
    items: Sequence[CartLineItem],
    rules: Iterable[PromotionRule],
    price_resolver: PriceResolver = resolve_unit_price,
    logger: logging.Logger | None = None,
) -> CartDiscountSummary:
    """
    Apply at most one promotion to the cart: the best-ranked rule among
    those that actually save money. Promotions never stack.

    On a complete tie the earliest rule in `rules` wins.
    """
    logger = logger or log

    candidates: list[AppliedDiscount] = []
    for rule in rules:
        if not rule.active:
            continue
        result = evaluate_rule(items, rule, price_resolver, logger)
        if result is None or result.savings <= 0:
            continue
        candidates.append(AppliedDiscount(rule=rule, result=result))

    if not candidates:
        return CartDiscountSummary()

    best = max(candidates, key=_ranking)

    if len(candidates) > 1:
        logger.info(
            f"{len(candidates)} discounts available, selected "
            f"'{best.rule.name or best.rule.id}' (savings {best.result.savings:.2f})"
        )
    else:
        logger.info(
            f"Applied discount '{best.rule.name or best.rule.id}' "
            f"(savings {best.result.savings:.2f})"
        )

    return CartDiscountSummary(
        total_savings=best.result.savings,
        applied_discounts=[best],
        free_items=best.result.free_items,
        discounted_items=best.result.discounted_items,
    )


def eligibility_progress(
    items: Sequence[CartLineItem],
    rules: Iterable[PromotionRule],
    price_resolver: PriceResolver = resolve_unit_price,
    logger: logging.Logger | None = None,
) -> list[EligibilityProgress]:
    """
    Report, for every active buy-X-get-Y rule touching the cart, how many
    more units are needed and what the rule would save right now.

    Sorted by potential savings, highest first.
    """
    logger = logger or log

    report: list[EligibilityProgress] = []

    for rule in rules:
        if not rule.active or rule.type != BUY_X_GET_Y:
            continue

        applicable = applicable_lines(items, rule)
        if not applicable:
            continue

        current_quantity = sum(item.quantity for item in applicable)
        threshold = progress_threshold(rule)
        is_eligible = current_quantity >= threshold

        potential_savings = 0.0
        if is_eligible:
            potential_savings = evaluate_buy_x_get_y(
                items, rule, price_resolver, logger
            ).savings

        report.append(
            EligibilityProgress(
                rule=rule,
                is_eligible=is_eligible,
                items_needed=max(0, threshold - current_quantity),
                current_quantity=current_quantity,
                potential_savings=potential_savings,
                description=format_discount_description(rule),
            )
        )

    report.sort(key=lambda entry: entry.potential_savings, reverse=True)
    return report
