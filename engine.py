"""
Traffic weight redistribution engine for split test variants.

This module contains pure, UI-agnostic functions used by the Streamlit app.
Keep all weight math here so it can be tested or reused independently of the
UI layer. Every function takes the caller's list of variants and returns a new
list; inputs are never mutated.

Weights are percentages of traffic. At rest (after add, remove or commit) a
non-empty set sums to 100. While a slider is being dragged, set_weight may
leave the set slightly off 100; commit_weight restores the total.
"""
from __future__ import annotations

import dataclasses
import logging
import math
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List

from config import DEFAULT_CONFIG, SplitTestConfig

logger = logging.getLogger(__name__)

TOTAL_WEIGHT = 100
# Fields a caller may change through update_variant
EDITABLE_FIELDS = ("name", "offer_id", "description")


@dataclass(frozen=True)
class Variant:
    id: str
    name: str
    weight: float = 0.0  # Percent of traffic (0 to 100)
    offer_id: str = ""
    description: str = ""


def _clamp(value: float, low: float = 0.0, high: float = float(TOTAL_WEIGHT)) -> float:
    return max(low, min(high, float(value)))


def _index_of(variants: List[Variant], variant_id: str) -> int:
    for i, v in enumerate(variants):
        if v.id == variant_id:
            return i
    return -1


def total_weight(variants: List[Variant]) -> float:
    return sum(v.weight for v in variants)


def is_balanced(variants: List[Variant], tolerance: float = DEFAULT_CONFIG.commit_tolerance) -> bool:
    """True when the running total is within tolerance of 100%, or the set is empty."""
    if not variants:
        return True
    return abs(total_weight(variants) - TOTAL_WEIGHT) <= tolerance


def evenize(variants: List[Variant]) -> List[Variant]:
    """
    Reset every variant to an equal share of 100%.

    Each variant gets floor(100 / N). The variant at index 0 also receives the
    remainder 100 - N * floor(100 / N), so three variants become [34, 33, 33].
    The result therefore depends on list order.
    """
    n = len(variants)
    if n == 0:
        return []

    even_weight = TOTAL_WEIGHT // n
    remainder = TOTAL_WEIGHT - even_weight * n
    return [
        dataclasses.replace(v, weight=even_weight + (remainder if i == 0 else 0))
        for i, v in enumerate(variants)
    ]


def new_variant(variants: List[Variant]) -> Variant:
    """Build the next blank variant, named after its position in the set."""
    return Variant(id=uuid.uuid4().hex, name=f"Variant {len(variants) + 1}")


def add_variant(variants: List[Variant], variant: Variant) -> List[Variant]:
    """Append a variant and re-evenize. The incoming weight is ignored."""
    return evenize(list(variants) + [variant])


def remove_variant(variants: List[Variant], variant_id: str) -> List[Variant]:
    """
    Remove a variant and re-evenize the rest.

    An unknown id is a silent no-op (typically a double click racing a
    removal): the weights come back unchanged. Removing the last variant
    leaves an empty set, which carries no weight at all.
    """
    if _index_of(variants, variant_id) < 0:
        logger.debug("remove_variant: no variant with id %s, ignoring", variant_id)
        return list(variants)
    return evenize([v for v in variants if v.id != variant_id])


def set_weight(variants: List[Variant], variant_id: str, new_weight: float) -> List[Variant]:
    """
    Move one variant's weight and shift the others proportionally.

    Parameters
    - variants: current variant set
    - variant_id: id of the variant whose slider moved
    - new_weight: requested weight, clamped to [0, 100]

    Returns
    - the updated variant set

    Notes
    - Each other variant gives up (or gains) a share of the change in
      proportion to its current weight, floored at 0. With floats and the
      floor the total can drift from 100; this is a live drag state and
      commit_weight settles it.
    - If every other variant is at 0 (or there are none) there is nothing to
      scale, so the whole set is re-evenized and new_weight is discarded.
    - An unknown id is a no-op.
    """
    idx = _index_of(variants, variant_id)
    if idx < 0:
        logger.debug("set_weight: no variant with id %s, ignoring", variant_id)
        return list(variants)

    new_weight = _clamp(new_weight)
    old_weight = variants[idx].weight
    delta = new_weight - old_weight

    others_total = sum(v.weight for i, v in enumerate(variants) if i != idx)
    if others_total == 0:
        logger.debug("set_weight: other variants carry no weight, falling back to even split")
        return evenize(variants)

    updated = []
    for i, v in enumerate(variants):
        if i == idx:
            updated.append(dataclasses.replace(v, weight=new_weight))
        else:
            adjustment = delta * (v.weight / others_total)
            updated.append(dataclasses.replace(v, weight=max(0.0, v.weight - adjustment)))
    return updated


def commit_weight(
    variants: List[Variant],
    tolerance: float = DEFAULT_CONFIG.commit_tolerance,
) -> List[Variant]:
    """
    Settle the set once a drag gesture ends.

    If the total drifted more than `tolerance` from 100, the proportional
    result is thrown away and the set is re-evenized. A set already within
    tolerance comes back unchanged, so committing twice is harmless.
    """
    if is_balanced(variants, tolerance):
        return list(variants)

    logger.info(
        "Weights total %.2f%% after drag, resetting %d variants to an even split",
        total_weight(variants),
        len(variants),
    )
    return evenize(variants)


def update_variant(variants: List[Variant], variant_id: str, **fields: Any) -> List[Variant]:
    """Change payload fields (name, offer_id, description) of one variant."""
    bad = sorted(set(fields) - set(EDITABLE_FIELDS))
    if bad:
        raise ValueError(
            f"Cannot update {', '.join(bad)} via update_variant; "
            f"editable fields are {', '.join(EDITABLE_FIELDS)}"
        )
    if _index_of(variants, variant_id) < 0:
        logger.debug("update_variant: no variant with id %s, ignoring", variant_id)
        return list(variants)
    return [dataclasses.replace(v, **fields) if v.id == variant_id else v for v in variants]


def suggest_weight(variants: List[Variant]) -> float:
    # Whatever share is still unassigned, e.g. for a new campaign destination
    return _clamp(TOTAL_WEIGHT - total_weight(variants))


def validate_variants(
    variants: List[Variant],
    config: SplitTestConfig = DEFAULT_CONFIG,
) -> List[str]:
    """Return a list of reasons the set cannot be saved (empty = valid)."""
    errors = []

    n = len(variants)
    if n < config.min_variants:
        errors.append(f"At least {config.min_variants} variants are required, got {n}")
    if n > config.max_variants:
        errors.append(f"At most {config.max_variants} variants are allowed, got {n}")

    ids = [v.id for v in variants]
    if len(ids) != len(set(ids)):
        errors.append("Variant ids must be unique")

    for v in variants:
        if not v.offer_id:
            errors.append(f"{v.name} has no offer selected")
        if not math.isfinite(v.weight) or v.weight <= 0:
            errors.append(f"{v.name} must receive some traffic (weight is {v.weight:g}%)")

    if variants and not is_balanced(variants, config.commit_tolerance):
        errors.append(
            f"Traffic weights must add up to 100% (currently {round(total_weight(variants))}%)"
        )

    return errors


def to_payload(
    variants: List[Variant],
    config: SplitTestConfig = DEFAULT_CONFIG,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Build the save payload for a split test's variants.

    Raises ValueError listing every validation error if the set cannot be
    saved. Weights are sent as whole percentages. Any rounding residue is
    spread one point at a time, heaviest variant first (list order on ties),
    so the payload sums to 100 and no weight goes negative.
    """
    errors = validate_variants(variants, config)
    if errors:
        raise ValueError("Invalid variant set: " + "; ".join(errors))

    weights = [int(round(v.weight)) for v in variants]
    residue = TOTAL_WEIGHT - sum(weights)
    step = 1 if residue > 0 else -1
    # Heaviest first; a rounded weight never drops below 0
    order = sorted(range(len(variants)), key=lambda i: -variants[i].weight)
    i = 0
    while residue:
        idx = order[i % len(order)]
        if weights[idx] + step >= 0:
            weights[idx] += step
            residue -= step
        i += 1

    return {
        "variants": [
            {
                "id": v.id,
                "name": v.name,
                "offerId": v.offer_id,
                "description": v.description,
                "weight": w,
            }
            for v, w in zip(variants, weights)
        ]
    }
