"""Transaction visibility, filtering and grouping for the dashboard and reports.

No network calls here: functions accept already-parsed transactions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from src.backend.ledger.integrations.sheet_schema import TransactionRecord, format_month_label
from src.backend.ledger.use_cases.identity import AppUser

ALL = "all"


class GroupDimension(str, Enum):
    GROUP_HEAD = "groupHead"
    MODE = "mode"
    MONTH = "month"
    PERSON = "person"


@dataclass(frozen=True, slots=True)
class TransactionFilters:
    date_from: str = ""
    date_to: str = ""
    person_name: str = ALL
    group_head: str = ALL
    mode: str = ALL
    reason: str = ALL


@dataclass(frozen=True, slots=True)
class GroupSummary:
    key: str
    incoming: float
    outgoing: float
    count: int

    @property
    def balance(self) -> float:
        return self.incoming - self.outgoing


@dataclass(frozen=True, slots=True)
class Totals:
    incoming: float
    outgoing: float
    count: int

    @property
    def balance(self) -> float:
        return self.incoming - self.outgoing


@dataclass(frozen=True, slots=True)
class DailyPoint:
    date: str
    income: float
    expense: float
    balance: float


def _active(value: str | None) -> bool:
    return bool(value) and value != ALL


def visible_transactions(
    transactions: Iterable[TransactionRecord], user: AppUser
) -> list[TransactionRecord]:
    """Admins see everything; others only rows under their own name."""

    if user.is_admin:
        return list(transactions)
    return [t for t in transactions if t.person_name == user.name]


def matches_filters(t: TransactionRecord, f: TransactionFilters) -> bool:
    if f.date_from and t.iso_date < f.date_from:
        return False
    if f.date_to and t.iso_date > f.date_to:
        return False
    if _active(f.person_name) and t.person_name != f.person_name:
        return False
    if _active(f.group_head) and t.group_head != f.group_head:
        return False
    if _active(f.mode) and t.mode != f.mode:
        return False
    if _active(f.reason) and t.reason != f.reason:
        return False
    return True


def apply_filters(
    transactions: Iterable[TransactionRecord], filters: TransactionFilters
) -> list[TransactionRecord]:
    return [t for t in transactions if matches_filters(t, filters)]


def group_key(t: TransactionRecord, dimension: GroupDimension) -> str:
    if dimension is GroupDimension.GROUP_HEAD:
        return t.group_head or "Uncategorized"
    if dimension is GroupDimension.MODE:
        return t.mode or "Unknown"
    if dimension is GroupDimension.MONTH:
        return format_month_label(t.date)
    return t.person_name or "Unknown"


def group_by(
    transactions: Iterable[TransactionRecord], dimension: GroupDimension
) -> list[GroupSummary]:
    """Sum incoming/outgoing and count rows per key, in first-seen order."""

    acc: dict[str, list[float]] = {}
    for t in transactions:
        bucket = acc.setdefault(group_key(t, dimension), [0.0, 0.0, 0])
        bucket[0] += t.incoming
        bucket[1] += t.outgoing
        bucket[2] += 1
    return [
        GroupSummary(key=k, incoming=v[0], outgoing=v[1], count=int(v[2]))
        for k, v in acc.items()
    ]


def members_of_group(
    transactions: Iterable[TransactionRecord], dimension: GroupDimension, key: str
) -> list[TransactionRecord]:
    return [t for t in transactions if group_key(t, dimension) == key]


def totals(transactions: Iterable[TransactionRecord]) -> Totals:
    incoming = 0.0
    outgoing = 0.0
    count = 0
    for t in transactions:
        incoming += t.incoming
        outgoing += t.outgoing
        count += 1
    return Totals(incoming=incoming, outgoing=outgoing, count=count)


def time_series(transactions: Iterable[TransactionRecord]) -> list[DailyPoint]:
    """Per-day income/expense in date order with a running balance."""

    daily: dict[str, list[float]] = {}
    for t in sorted(transactions, key=lambda t: t.date):
        bucket = daily.setdefault(t.iso_date, [0.0, 0.0])
        bucket[0] += t.incoming
        bucket[1] += t.outgoing

    out: list[DailyPoint] = []
    running = 0.0
    for day, (income, expense) in daily.items():
        running += income - expense
        out.append(DailyPoint(date=day, income=income, expense=expense, balance=running))
    return out


def expense_by_group_head(transactions: Iterable[TransactionRecord]) -> list[GroupSummary]:
    """Outgoing totals for rows that have both an expense and a group head."""

    return group_by(
        (t for t in transactions if t.outgoing > 0 and t.group_head),
        GroupDimension.GROUP_HEAD,
    )


def newest_first(transactions: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    return sorted(transactions, key=lambda t: t.date, reverse=True)


@dataclass(frozen=True, slots=True)
class Dashboard:
    totals: Totals
    series: list[DailyPoint]
    expense_by_group_head: list[GroupSummary]
    recent: list[TransactionRecord]


def build_dashboard(transactions: list[TransactionRecord], *, recent_limit: int = 5) -> Dashboard:
    return Dashboard(
        totals=totals(transactions),
        series=time_series(transactions),
        expense_by_group_head=expense_by_group_head(transactions),
        recent=newest_first(transactions)[:recent_limit],
    )


def build_reports(
    transactions: list[TransactionRecord], user: AppUser
) -> dict[GroupDimension, list[GroupSummary]]:
    """Report breakdown cards; the person-wise card is admin-only."""

    dims = [GroupDimension.GROUP_HEAD, GroupDimension.MODE, GroupDimension.MONTH]
    if user.is_admin:
        dims.append(GroupDimension.PERSON)
    return {d: group_by(transactions, d) for d in dims}
