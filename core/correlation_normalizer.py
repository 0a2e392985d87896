"""Correlation normalization: CDN totals + per-signature results → CorrelationSummary."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from core.models import (
    CorrelationGroup,
    CorrelationItem,
    CorrelationPrior,
    CorrelationSummary,
    RawCorrelationResponse,
    RawCorrelationResult,
    RawCorrelationTotals,
)

CONJUNCTION = " ∧ "


def format_value(value: Any) -> str:
    """Render an item value the way the correlation data spells it (``true``, ``null``)."""
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True)


def attribute_name(item: dict[str, Any]) -> str:
    return CONJUNCTION.join(sorted(item))


def format_item_label(item: dict[str, Any]) -> str:
    """``key = value`` pairs sorted by key and joined with a logical AND."""
    return CONJUNCTION.join(f"{key} = {format_value(item[key])}" for key in sorted(item))


def percentage(count: float, total: float) -> float:
    """``count / total * 100`` rounded to one decimal; 0.0 when total is zero."""
    if total <= 0:
        return 0.0
    return round(count / total * 100, 1)


def _item(result: RawCorrelationResult, group_total: float, reference_total: int) -> CorrelationItem:
    prior = None
    if result.prior is not None:
        prior = CorrelationPrior(
            label=format_item_label(result.prior.item),
            percentage=percentage(result.prior.count_group, result.prior.total_group),
            reference_percentage=percentage(
                result.prior.count_reference, result.prior.total_reference
            ),
        )
    return CorrelationItem(
        attribute=attribute_name(result.item),
        value=CONJUNCTION.join(format_value(result.item[k]) for k in sorted(result.item)),
        label=format_item_label(result.item),
        count=result.count_group,
        reference_count=result.count_reference,
        percentage=percentage(result.count_group, group_total),
        reference_percentage=percentage(result.count_reference, reference_total),
        prior=prior,
    )


def group_items(items: Sequence[CorrelationItem]) -> tuple[CorrelationGroup, ...]:
    """Group by attribute in first-seen order; each group by count desc, then label."""
    groups: dict[str, list[CorrelationItem]] = {}
    for item in items:
        groups.setdefault(item.attribute, []).append(item)
    return tuple(
        CorrelationGroup(
            attribute=attribute,
            items=tuple(sorted(members, key=lambda i: (-i.count, i.label))),
        )
        for attribute, members in groups.items()
    )


def normalize_correlations(
    totals: RawCorrelationTotals,
    response: RawCorrelationResponse,
    signature: str,
    channel: str,
) -> CorrelationSummary:
    reference_total = totals.total_for_channel(channel) or 0
    items = tuple(_item(r, response.total, reference_total) for r in response.results)
    return CorrelationSummary(
        signature=signature,
        channel=channel,
        date=totals.date,
        signature_count=response.total,
        reference_count=reference_total,
        items=items,
        groups=group_items(items),
    )
