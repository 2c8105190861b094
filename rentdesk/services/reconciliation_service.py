"""
Payment Schedule Reconciliation Engine

A contract declares its instalments as two comma-separated strings:
  payment_dates   "01-01-2024, 01-04-2024, 01-07-2024"
  payment_amounts "1000, 1000, 1000"

Payment rows are edited independently of those strings, so every read
rebuilds the schedule and lines each slot up with a stored payment:

  1. match by date   payment.due_date == canonical date or original token
  2. match by index  the i-th payment in due-date order, unless another
                     slot already claimed it by date
  3. unmatched       status "pending", amount from the contract or 0

The displayed due date is always the contract's own token.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Iterable, List, Optional, Sequence

from rentdesk.models.payment import PaymentStatus
from rentdesk.schemas.schedule import EffectivePayment, ScheduleEntry, ScheduleSummary

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NOT_DATE_CHARS = re.compile(r"[^\d/-]")
_LEADING_FLOAT = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


# ── Parsing helpers ───────────────────────────────────────────────────────────

def normalize_date(token: str) -> str:
    """
    Return ``token`` as YYYY-MM-DD, or "" when it can't be read as a date.

    Accepts DD-MM-YYYY, DD/MM/YYYY, YYYY/MM/DD and passes YYYY-MM-DD through.
    Day must be 1..31, month 1..12 and year after 1900.
    """
    if not token:
        return ""
    token = token.strip()
    if _ISO_DATE.match(token):
        return token

    parts = re.split(r"[-/]", _NOT_DATE_CHARS.sub("", token))
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return ""

    if len(parts[0]) <= 2 and len(parts[2]) == 4:
        day, month, year = parts
    elif len(parts[0]) == 4 and len(parts[2]) <= 2:
        year, month, day = parts
    else:
        return ""

    if 1 <= int(day) <= 31 and 1 <= int(month) <= 12 and int(year) > 1900:
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return ""


def parse_amount(token: str) -> Optional[float]:
    """Leading-number parse; anything unreadable is None, never NaN."""
    match = _LEADING_FLOAT.match((token or "").strip())
    if not match:
        return None
    value = float(match.group(0))
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def split_dates(payment_dates: Optional[str]) -> List[str]:
    return [d.strip() for d in (payment_dates or "").split(",") if d.strip()]


def split_amounts(payment_amounts: Optional[str]) -> List[Optional[float]]:
    # Empty tokens are kept so positions stay aligned with the dates
    if not payment_amounts:
        return []
    return [parse_amount(a) for a in payment_amounts.split(",")]


def parse_schedule(payment_dates: Optional[str], payment_amounts: Optional[str]) -> List[ScheduleEntry]:
    """Turn the contract's raw strings into ordered schedule entries."""
    dates = split_dates(payment_dates)
    if not dates:
        return []

    amounts = split_amounts(payment_amounts)
    entries = []
    for index, original in enumerate(dates):
        entries.append(
            ScheduleEntry(
                index=index,
                original=original,
                canonical=normalize_date(original) or original,
                amount=amounts[index] if index < len(amounts) else None,
            )
        )
    return entries


# ── Matching ──────────────────────────────────────────────────────────────────

def payment_sort_key(payment) -> str:
    due = payment.due_date or ""
    return normalize_date(due) or due


def sort_payments(payments: Iterable) -> list:
    """Payments ascending by due date (stable for equal dates)."""
    return sorted(payments, key=payment_sort_key)


def _match_by_date(entry: ScheduleEntry, payments: Sequence):
    for payment in payments:
        if payment.due_date == entry.canonical or payment.due_date == entry.original:
            return payment
    return None


def match_payments(
    entries: Sequence[ScheduleEntry],
    payments: Sequence,
    contract_id,
    currency: Optional[str] = None,
    payment_method: Optional[str] = None,
) -> List[EffectivePayment]:
    """
    Align each schedule entry with zero or one payment.

    ``payments`` must already be sorted with :func:`sort_payments`.
    Payments that no entry picks up are ignored. A payment whose due date
    belongs to another slot is never taken by the index fallback.
    """
    date_matches = [_match_by_date(entry, payments) for entry in entries]
    claimed = {id(p) for p in date_matches if p is not None}

    effective = []
    for entry, matched in zip(entries, date_matches):
        matched_by = "date"
        if matched is None:
            candidate = payments[entry.index] if entry.index < len(payments) else None
            if candidate is not None and id(candidate) not in claimed:
                matched = candidate
            matched_by = "index" if matched is not None else "none"

        if entry.amount is not None:
            amount = entry.amount
        elif matched is not None and matched.amount is not None:
            amount = matched.amount
        else:
            amount = 0.0

        effective.append(
            EffectivePayment(
                index=entry.index,
                payment_id=matched.id if matched is not None else None,
                contract_id=contract_id,
                due_date=entry.original,
                amount=amount,
                currency=currency,
                paid_date=matched.paid_date if matched is not None else None,
                payment_method=payment_method,
                status=(matched.status if matched is not None and matched.status else PaymentStatus.PENDING.value),
                matched_by=matched_by,
            )
        )
    return effective


def effective_payments(contract, payments: Iterable) -> List[EffectivePayment]:
    """Rebuild the live schedule of ``contract`` from its strings and payments."""
    entries = parse_schedule(contract.payment_dates, contract.payment_amounts)
    if not entries:
        return []

    own = sort_payments(p for p in payments if p.contract_id == contract.id)
    result = match_payments(
        entries,
        own,
        contract.id,
        currency=contract.currency,
        payment_method=contract.payment_method,
    )

    orphans = len(own) - len({e.payment_id for e in result if e.payment_id is not None})
    if orphans > 0:
        logger.debug(f"[reconcile] contract {contract.id}: {orphans} payment(s) not on schedule")
    return result


def summarize(entries: Iterable[EffectivePayment]) -> ScheduleSummary:
    counts = {status.value: 0 for status in PaymentStatus}
    totals = {status.value: 0.0 for status in PaymentStatus}
    total_entries = 0
    total_amount = 0.0

    for entry in entries:
        total_entries += 1
        total_amount += entry.amount
        if entry.status in counts:
            counts[entry.status] += 1
            totals[entry.status] += entry.amount

    return ScheduleSummary(
        total_entries=total_entries,
        total_amount=round(total_amount, 2),
        paid_count=counts["paid"],
        paid_amount=round(totals["paid"], 2),
        pending_count=counts["pending"],
        pending_amount=round(totals["pending"], 2),
        scheduled_count=counts["scheduled"],
        scheduled_amount=round(totals["scheduled"], 2),
        overdue_count=counts["overdue"],
        overdue_amount=round(totals["overdue"], 2),
    )
