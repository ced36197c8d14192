"""Choice of the modification time slot.

A pure function of the clock, the lead time and the registry's slot labels,
so it can be tested against a fixed `now`.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from superglue.core.domain.models import Slot
from superglue.core.errors import NoSlotError


def format_hh_mm(moment: datetime) -> str:
    return moment.strftime("%H:%M")


def format_dd_mm_yyyy(moment: datetime) -> str:
    return moment.strftime("%d/%m/%Y")


def pick_slot(now: datetime, lead_minutes: int, available_slots: Sequence[str]) -> Slot:
    """First slot strictly after `now + lead_minutes`, else tomorrow's first slot.

    `available_slots` are `HH:MM` labels in ascending order. Dates are
    counted from the day of `now + lead_minutes`; `is_today` is only set when
    that is still the day of `now`.
    """

    if not available_slots:
        raise NoSlotError("the registry offered no modification time slots")

    earliest = now + timedelta(minutes=lead_minutes)
    cutoff = format_hh_mm(earliest)
    for label in available_slots:
        if cutoff < label:
            return Slot(time=label, date=format_dd_mm_yyyy(earliest), is_today=earliest.date() == now.date())
    return Slot(
        time=available_slots[0],
        date=format_dd_mm_yyyy(earliest + timedelta(days=1)),
        is_today=False,
    )
