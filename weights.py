"""
Weight Redistributor and Sub-Factor Scaler

Two linked configurations, kept consistent by explicit conversions:

    CategoryWeights     {category: points}            Σ = 100
    SubFactorWeights    {category: {name: points}}    Σ per category = category points

Moving one category redistributes the others in proportion to their current
share, then rescales each touched category's sub-factors. Moving one
sub-factor re-derives its category total and feeds that back in as a
category move. Exactly one structure is authoritative per edit.

Rounding drift is never spread around: the whole residual goes to the
largest sibling (first in catalog order on ties).

Every function returns fresh mappings; inputs are never mutated.
"""

import logging
from typing import Dict, NamedTuple, Optional

from config import WEIGHTS
from factors import CATEGORY_IDS, default_category_weights, default_sub_factor_weights, get_template
from models import CategoryWeights, SubFactorWeights, clamp, round_half_up, round_to_step

logger = logging.getLogger(__name__)


class WeightConfig(NamedTuple):
    category_weights: CategoryWeights
    sub_factor_weights: SubFactorWeights


# ── Helpers ──────────────────────────────────────────────────────────────────

def _complete(weights: CategoryWeights) -> CategoryWeights:
    """Catalog-ordered copy with defaults filled in for missing categories."""
    defaults = default_category_weights()
    return {cid: float(weights.get(cid, defaults[cid])) for cid in CATEGORY_IDS}


def _copy_sub_weights(sub_weights: SubFactorWeights) -> SubFactorWeights:
    return {cid: dict(values) for cid, values in sub_weights.items()}


def _validate_category_weight(category: str, value: float) -> None:
    get_template(category)
    if not 0 <= value <= WEIGHTS["category_max"]:
        raise ValueError(
            f"Weight {value} for {category} outside 0..{WEIGHTS['category_max']:g}"
        )


def sub_factor_sum(
    category: str,
    sub_weights: SubFactorWeights,
    defaults: Optional[SubFactorWeights] = None,
) -> float:
    """Sum of a category's sub-factor weights, defaults standing in for unset ones."""
    defaults = defaults or default_sub_factor_weights()
    cat_defaults = defaults.get(category, {})
    current = sub_weights.get(category, {})
    return sum(current.get(name, cat_defaults[name]) for name in cat_defaults)


def total_weight(weights: CategoryWeights) -> float:
    return sum(weights.values())


def weights_balanced(weights: CategoryWeights) -> bool:
    return abs(total_weight(weights) - WEIGHTS["total"]) < WEIGHTS["category_tolerance"]


# ── Weight Redistributor ─────────────────────────────────────────────────────

def redistribute_category_weight(
    changed: str,
    new_weight: float,
    current_weights: CategoryWeights,
) -> CategoryWeights:
    """
    Set ``changed`` to ``new_weight`` and move the others by the opposite
    amount, each in proportion to its share of the other categories.

    Adjusted weights are rounded to 0.1 and floored at 0; the remaining
    error against 100 lands on the largest other category. If every other
    category is already 0 there is nothing to scale and the total is left
    off 100.
    """
    _validate_category_weight(changed, new_weight)
    current = _complete(current_weights)

    updated = dict(current)
    updated[changed] = float(new_weight)
    diff = new_weight - current[changed]
    if diff == 0:
        return updated

    others = [cid for cid in CATEGORY_IDS if cid != changed]
    other_total = sum(current[cid] for cid in others)

    if other_total <= 0:
        logger.debug(f"{changed} -> {new_weight}: other categories are all zero, nothing to redistribute")
        return updated

    remaining = -diff
    for cid in others:
        proportion = current[cid] / other_total
        adjustment = round_half_up(remaining * proportion, 1)
        updated[cid] = max(0.0, round_half_up(current[cid] + adjustment, 1))

    rounding_error = round_half_up(WEIGHTS["total"] - total_weight(updated), 1)
    if abs(rounding_error) > 0.01:
        largest = max(others, key=lambda cid: updated[cid])
        updated[largest] = max(0.0, round_half_up(updated[largest] + rounding_error, 1))
        logger.debug(f"Rounding residual {rounding_error:+.1f} applied to {largest}")

    return updated


# ── Sub-Factor Scaler ────────────────────────────────────────────────────────

def scale_sub_factor_weights(
    category: str,
    new_category_weight: float,
    current_sub_weights: SubFactorWeights,
    defaults: Optional[SubFactorWeights] = None,
) -> SubFactorWeights:
    """
    Rescale one category's sub-factors so they sum to ``new_category_weight``.

    Each weight is scaled by the same factor, snapped to 0.5 and kept in
    0..20. The snapped residual (if at least 0.5) goes to the largest
    sub-factor; whatever the 0..20 clamp stops it from taking moves on to
    the next largest. A zero target zeroes the category. A category whose
    sub-factors are all zero is scaled from the catalog split instead.
    """
    defaults = defaults or default_sub_factor_weights()
    get_template(category)

    step = WEIGHTS["sub_factor_step"]
    upper = WEIGHTS["sub_factor_max"]
    cat_defaults = defaults.get(category, {})
    current = current_sub_weights.get(category, {})
    names = list(cat_defaults)

    updated = _copy_sub_weights(current_sub_weights)
    source = {name: current.get(name, cat_defaults[name]) for name in names}
    current_sum = sum(source.values())

    if current_sum <= 0 and new_category_weight > 0:
        logger.debug(f"{category}: sub-factors sum to zero, scaling catalog defaults to {new_category_weight}")
        source = {name: float(cat_defaults[name]) for name in names}
        current_sum = sum(source.values())

    if current_sum > 0 and new_category_weight > 0:
        scale = new_category_weight / current_sum
        scaled: Dict[str, float] = {
            name: clamp(round_to_step(source[name] * scale, step), 0.0, upper)
            for name in names
        }

        residual = round_to_step(new_category_weight - sum(scaled.values()), step)
        # sorted() is stable, so ties stay in catalog order
        for name in sorted(names, key=lambda n: -scaled[n]):
            if abs(residual) < step:
                break
            adjusted = clamp(scaled[name] + residual, 0.0, upper)
            residual = round_to_step(residual - (adjusted - scaled[name]), step)
            scaled[name] = adjusted

        updated[category] = scaled
    elif new_category_weight == 0:
        updated[category] = {name: 0.0 for name in names}

    return updated


# ── Edits ────────────────────────────────────────────────────────────────────

def _rescale_changed(
    before: CategoryWeights,
    after: CategoryWeights,
    sub_weights: SubFactorWeights,
    defaults: SubFactorWeights,
    skip: str,
) -> SubFactorWeights:
    """Follow a redistribution down into the sub-factors of every moved category."""
    for cid in CATEGORY_IDS:
        if cid == skip or after[cid] == before[cid]:
            continue
        sub_weights = scale_sub_factor_weights(cid, after[cid], sub_weights, defaults)
    return sub_weights


def apply_category_edit(
    category: str,
    new_weight: float,
    current_category_weights: CategoryWeights,
    current_sub_weights: SubFactorWeights,
    defaults: Optional[SubFactorWeights] = None,
) -> WeightConfig:
    """Category slider moved: redistribute, then rescale every touched category."""
    defaults = defaults or default_sub_factor_weights()
    before = _complete(current_category_weights)
    if new_weight == before.get(category):
        return WeightConfig(before, _copy_sub_weights(current_sub_weights))

    after = redistribute_category_weight(category, new_weight, before)
    sub_weights = scale_sub_factor_weights(category, new_weight, current_sub_weights, defaults)
    sub_weights = _rescale_changed(before, after, sub_weights, defaults, skip=category)

    logger.info(f"Category {category}: {before[category]:g} -> {new_weight:g} (total {total_weight(after):.1f})")
    return WeightConfig(after, sub_weights)


def apply_sub_factor_edit(
    category: str,
    name: str,
    new_value: float,
    current_sub_weights: SubFactorWeights,
    current_category_weights: CategoryWeights,
    defaults: Optional[SubFactorWeights] = None,
) -> WeightConfig:
    """
    Sub-factor slider moved: the category total becomes the sub-factor sum
    (to 0.1) and, if that moved by at least 0.1, is redistributed as a
    category edit. The edited category's sub-factors stay exactly as set,
    with two exceptions where they are rescaled to the total actually used:

    - the sum is above the category maximum, so the total is capped at 100
    - every other category is at zero, so there is nothing to trade against
      and the category keeps its current weight
    """
    defaults = defaults or default_sub_factor_weights()
    get_template(category)
    cat_defaults = defaults.get(category, {})
    if name not in cat_defaults:
        raise ValueError(f"Unknown sub-factor {name!r} in {category}")
    if not 0 <= new_value <= WEIGHTS["sub_factor_max"]:
        raise ValueError(f"Sub-factor weight {new_value} outside 0..{WEIGHTS['sub_factor_max']:g}")

    sub_weights = _copy_sub_weights(current_sub_weights)
    current = sub_weights.get(category, {})
    sub_weights[category] = {n: current.get(n, cat_defaults[n]) for n in cat_defaults}
    sub_weights[category][name] = float(new_value)

    before = _complete(current_category_weights)
    requested = round_half_up(sub_factor_sum(category, sub_weights, defaults), 1)
    new_category_weight = min(requested, WEIGHTS["category_max"])
    if sum(before[cid] for cid in CATEGORY_IDS if cid != category) <= 0:
        new_category_weight = before[category]

    if new_category_weight != requested:
        logger.info(f"{category}: sub-factors sum to {requested:g}, holding category at {new_category_weight:g}")
        sub_weights = scale_sub_factor_weights(category, new_category_weight, sub_weights, defaults)

    # compare at 0.1 resolution so float noise in the difference cannot mask a real move
    if round_half_up(abs(new_category_weight - before[category]), 1) < WEIGHTS["edit_threshold"]:
        return WeightConfig(before, sub_weights)

    after = redistribute_category_weight(category, new_category_weight, before)
    sub_weights = _rescale_changed(before, after, sub_weights, defaults, skip=category)

    logger.info(f"Sub-factor {category}/{name} -> {new_value:g}; category {before[category]:g} -> {new_category_weight:g}")
    return WeightConfig(after, sub_weights)


def reset_category(
    category: str,
    current_category_weights: CategoryWeights,
    current_sub_weights: SubFactorWeights,
    defaults: Optional[SubFactorWeights] = None,
) -> WeightConfig:
    """Category back to its catalog weight and sub-factors; the others absorb the move."""
    defaults = defaults or default_sub_factor_weights()
    default_weight = get_template(category).default_weight

    before = _complete(current_category_weights)
    after = redistribute_category_weight(category, default_weight, before)

    sub_weights = _copy_sub_weights(current_sub_weights)
    sub_weights[category] = dict(defaults[category])
    sub_weights = _rescale_changed(before, after, sub_weights, defaults, skip=category)
    return WeightConfig(after, sub_weights)


def reset_all() -> WeightConfig:
    return WeightConfig(default_category_weights(), default_sub_factor_weights())


def has_category_changes(
    category: str,
    category_weights: CategoryWeights,
    sub_weights: SubFactorWeights,
    defaults: Optional[SubFactorWeights] = None,
) -> bool:
    """True if the category or any of its sub-factors differs from the catalog."""
    defaults = defaults or default_sub_factor_weights()
    if _complete(category_weights)[category] != get_template(category).default_weight:
        return True
    cat_defaults = defaults.get(category, {})
    current = sub_weights.get(category, {})
    return any(current.get(n, cat_defaults[n]) != cat_defaults[n] for n in cat_defaults)
