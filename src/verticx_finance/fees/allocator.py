from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..academics.session_calendar import short_label
from ..common.money import ZERO, clamp_non_negative
from ..core.exceptions import ConfigurationMissing
from .model import FeeTemplate


def allocate(template: Optional[FeeTemplate], months: Sequence[str]) -> dict[str, Decimal]:
    """Per-month due amounts for a session, keyed by short month label.

    Months absent from the template's breakdown are due 0. Raises
    ConfigurationMissing when there is no breakdown to allocate from.
    """
    if template is None:
        raise ConfigurationMissing("No fee template assigned")
    if not template.monthly_breakdown:
        raise ConfigurationMissing(f"Fee template {template.template_id} has no monthly breakdown")

    by_label: dict[str, Decimal] = {}
    for entry in template.monthly_breakdown:
        label = short_label(entry.month)
        # Duplicate labels keep the first entry, as a lookup by month would.
        if label not in by_label:
            by_label[label] = clamp_non_negative(entry.total or ZERO)

    return {short_label(m): by_label.get(short_label(m), ZERO) for m in months}
