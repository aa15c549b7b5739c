"""
Split Test Variant Setup

Run with: streamlit run main.py

This page configures how a split test divides traffic between its variants.
Each variant points at an offer and carries a traffic weight (slider 0–100,
step 1). The weights always add back up to 100%.

Columns:
1) Variant
2) Traffic % (slider)
3) Offer
4) Description
5) Remove

Weighting behavior:
- Moving a slider shifts the other variants in proportion to their current
  share, so a variant at 30% gives up three times as much as one at 10%.
- If the total still drifts from 100% once the slider is released, every
  variant snaps back to an even split (remainder to the first variant).
- Adding or removing a variant re-splits traffic evenly.
- A split test keeps between 2 and 5 variants.
"""

from __future__ import annotations

import logging
from typing import List

import streamlit as st

from config import AVAILABLE_OFFERS, DEFAULT_CONFIG, setup_logging
from engine import (
    Variant,
    add_variant,
    commit_weight,
    evenize,
    is_balanced,
    new_variant,
    remove_variant,
    set_weight,
    suggest_weight,
    to_payload,
    total_weight,
    update_variant,
    validate_variants,
)

logger = logging.getLogger(__name__)

settings = DEFAULT_CONFIG
OFFER_LABELS = {offer.id: f"{offer.name} ({offer.network})" for offer in AVAILABLE_OFFERS}
COLUMN_WIDTHS = [1.6, 3.0, 2.4, 2.6, 0.8]

# --------------------------- State Management ---------------------------


def store_variants(variants: List[Variant]) -> None:
    """Save variants and push their weights into the slider widget state."""
    st.session_state.variants = variants
    for v in variants:
        st.session_state[f"weight_{v.id}"] = float(v.weight)


def init_state() -> None:
    """Start a new split test with the minimum number of evenly split variants."""
    variants: List[Variant] = []
    for _ in range(settings.min_variants):
        variants = add_variant(variants, new_variant(variants))
    store_variants(variants)


def ensure_initialized() -> None:
    if "variants" not in st.session_state:
        init_state()


# --------------------------- Widget Callbacks ---------------------------


def on_weight_change(variant_id: str) -> None:
    # Streamlit reports the slider once it is released, so the drag and the
    # commit happen in the same callback.
    new_weight = st.session_state[f"weight_{variant_id}"]
    variants = set_weight(st.session_state.variants, variant_id, new_weight)
    store_variants(commit_weight(variants, settings.commit_tolerance))


def on_add() -> None:
    variants = st.session_state.variants
    if len(variants) >= settings.max_variants:
        return
    store_variants(add_variant(variants, new_variant(variants)))


def on_remove(variant_id: str) -> None:
    variants = st.session_state.variants
    if len(variants) <= settings.min_variants:
        return
    store_variants(remove_variant(variants, variant_id))
    # Drop widget state left behind by the removed row
    for prefix in ("weight_", "offer_", "description_"):
        key = f"{prefix}{variant_id}"
        if key in st.session_state:
            del st.session_state[key]


def on_offer_change(variant_id: str) -> None:
    offer_id = st.session_state[f"offer_{variant_id}"]
    st.session_state.variants = update_variant(st.session_state.variants, variant_id, offer_id=offer_id)


def on_description_change(variant_id: str) -> None:
    description = st.session_state[f"description_{variant_id}"]
    st.session_state.variants = update_variant(
        st.session_state.variants, variant_id, description=description
    )


def on_reset() -> None:
    store_variants(evenize(st.session_state.variants))


# --------------------------- UI Rendering ---------------------------


def render_variant_row(variant: Variant, can_remove: bool) -> None:
    c1, c2, c3, c4, c5 = st.columns(COLUMN_WIDTHS, gap="small")
    with c1:
        st.write(variant.name)
    with c2:
        st.slider(
            label=variant.name,
            min_value=0.0,
            max_value=100.0,
            step=settings.slider_step,
            key=f"weight_{variant.id}",
            on_change=on_weight_change,
            args=(variant.id,),
            label_visibility="collapsed",
        )
    with c3:
        options = [""] + list(OFFER_LABELS)
        st.selectbox(
            label="Offer",
            options=options,
            index=options.index(variant.offer_id) if variant.offer_id in options else 0,
            format_func=lambda offer_id: OFFER_LABELS.get(offer_id, "Choose an offer"),
            key=f"offer_{variant.id}",
            on_change=on_offer_change,
            args=(variant.id,),
            label_visibility="collapsed",
        )
    with c4:
        st.text_area(
            label="Description",
            value=variant.description,
            placeholder="Optional notes about this variant",
            key=f"description_{variant.id}",
            on_change=on_description_change,
            args=(variant.id,),
            label_visibility="collapsed",
        )
    with c5:
        st.button(
            "✕",
            key=f"remove_{variant.id}",
            on_click=on_remove,
            args=(variant.id,),
            disabled=not can_remove,
            help=(
                f"Remove {variant.name}"
                if can_remove
                else f"A split test needs at least {settings.min_variants} variants"
            ),
        )


def render_save(variants: List[Variant]) -> None:
    if not st.button("Save Split Test", key="save", type="primary"):
        return

    errors = validate_variants(variants, settings)
    if errors:
        for err in errors:
            st.warning(err)
        return

    payload = to_payload(variants, settings)
    logger.info("Saving split test with %d variants", len(payload["variants"]))
    st.success("Variant setup is ready to save.")
    st.json(payload)


def main() -> None:
    st.set_page_config(page_title="Split Test Variants", layout="wide")
    setup_logging()
    st.title("Split Test Variants")

    ensure_initialized()

    with st.sidebar:
        st.markdown("### Setup")
        st.caption(
            f"Split tests hold {settings.min_variants}–{settings.max_variants} variants. "
            "Weights snap back to an even split if a slider leaves them off 100%."
        )
        st.button(
            "Reset to Even Split",
            key="reset",
            on_click=on_reset,
            help="Give every variant an equal share of traffic.",
        )

    variants: List[Variant] = st.session_state.variants
    n = len(variants)

    st.button(
        "Add Variant",
        key="add_variant",
        on_click=on_add,
        disabled=n >= settings.max_variants,
    )

    if n == 0:
        st.info('No variants added yet. Click "Add Variant" to start.')
        return

    # Display headers
    header_cols = st.columns(COLUMN_WIDTHS, gap="small")
    headers = ["Variant", "Traffic %", "Offer", "Description", ""]
    for col, h in zip(header_cols, headers):
        col.markdown(f"**{h}**")

    can_remove = n > settings.min_variants
    for variant in variants:
        render_variant_row(variant, can_remove)

    # Totals row
    total = total_weight(variants)
    c1, c2, _, _, _ = st.columns(COLUMN_WIDTHS, gap="small")
    with c1:
        st.markdown("**Totals**")
    with c2:
        st.markdown(f"**{total:.0f}%**")

    if not is_balanced(variants, settings.commit_tolerance):
        st.warning(f"Traffic weights must add up to 100% (currently {round(total)}%)")

    with st.expander("Details & Notes"):
        st.markdown(f"- Variants: {n} (max {settings.max_variants})")
        missing = [v.name for v in variants if not v.offer_id]
        if missing:
            st.markdown(f"- Missing offers: {', '.join(missing)}")
        st.markdown(
            "- Weights: " + ", ".join(f"{v.name} {v.weight:.0f}%" for v in variants)
        )
        st.markdown(f"- Unassigned traffic: {suggest_weight(variants):.0f}%")

    render_save(variants)


if __name__ == "__main__":

    main()
