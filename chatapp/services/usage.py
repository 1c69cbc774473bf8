"""Append-only usage recorder and the read-side rollups computed from it."""

from __future__ import annotations

from collections import Counter, OrderedDict
from typing import Dict, Iterable, List, Optional

from ..models.domain import DailyUsage, UsageStat, UsageTotals
from .session_store import SessionStore


class UsageRecorder:
    """Records one immutable row per usage event; does no aggregation itself."""

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def record(
        self,
        session_id: str,
        conversations_created: int = 0,
        messages_exchanged: int = 0,
        tokens_used: int = 0,
        average_response_time: int = 0,
        models_used: Optional[Dict[str, int]] = None,
    ) -> UsageStat:
        row = UsageStat(
            conversations_created=conversations_created or 0,
            messages_exchanged=messages_exchanged or 0,
            tokens_used=tokens_used or 0,
            average_response_time=average_response_time or 0,
            models_used=dict(models_used or {}),
        )
        bundle = self.store.get_or_create(session_id)
        with bundle.lock:
            bundle.usage.append(row)
        return row

    def list(self, session_id: str) -> List[UsageStat]:
        bundle = self.store.get_or_create(session_id)
        with bundle.lock:
            return list(bundle.usage)


# ─────────────────────────── Read-side aggregation ───────────────────────────
def totals(rows: Iterable[UsageStat], conversation_count: int) -> UsageTotals:
    rows = list(rows)
    timed = [r.average_response_time for r in rows if r.messages_exchanged]
    return UsageTotals(
        total_tokens=sum(r.tokens_used for r in rows),
        total_messages=sum(r.messages_exchanged for r in rows),
        total_conversations=conversation_count,
        average_response_time=(sum(timed) / len(timed)) if timed else 0.0,
    )


def daily(rows: Iterable[UsageStat]) -> List[DailyUsage]:
    """Buckets rows by UTC calendar day, oldest day first."""
    buckets: "OrderedDict[object, List[UsageStat]]" = OrderedDict()
    for row in sorted(rows, key=lambda r: r.date):
        buckets.setdefault(row.date.date(), []).append(row)

    rollups = []
    for day, day_rows in buckets.items():
        timed = [r.average_response_time for r in day_rows if r.messages_exchanged]
        rollups.append(
            DailyUsage(
                date=day,
                conversations_created=sum(r.conversations_created for r in day_rows),
                messages_exchanged=sum(r.messages_exchanged for r in day_rows),
                tokens_used=sum(r.tokens_used for r in day_rows),
                average_response_time=(sum(timed) / len(timed)) if timed else 0.0,
                models_used=per_model(day_rows),
            )
        )
    return rollups


def per_model(rows: Iterable[UsageStat]) -> Dict[str, int]:
    counts: Counter = Counter()
    for row in rows:
        counts.update(row.models_used)
    return dict(counts)
