"""Cancel pending orders whose customer never came back from the gateway.

Designed to be triggered periodically by an external scheduler (cron, K8s
CronJob) via the maintenance API endpoint or ``manage.py reap-pending``.
Each stale order is cancelled through the normal ledger transition, with a
note saying why, so a late verification is reported as a conflict instead
of silently completing an order nobody is watching.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from ordering.config import get_settings
from ordering.errors import LedgerStorageError
from ordering.order.ledger import get_ledger
from ordering.order.transitions import OrderStatus

logger = structlog.get_logger(__name__)


@dataclass
class ReapReport:
    cutoff: datetime
    cancelled: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class PendingOrderReaper:
    def __init__(self, ledger=None, settings=None):
        self.ledger = ledger or get_ledger()
        self.settings = settings or get_settings()

    def reap(self, threshold_hours=None, as_of=None) -> ReapReport:
        as_of = as_of or datetime.now(UTC)
        if threshold_hours is None:
            threshold_hours = self.settings.pending_order_ttl_hours
        cutoff = as_of - timedelta(hours=threshold_hours)

        logger.info("Reaping stale pending orders", cutoff=cutoff.isoformat(), threshold_hours=threshold_hours)
        report = ReapReport(cutoff=cutoff)

        for order in self.ledger.pending_since(cutoff):
            order_id = str(order.id)
            note = f"Auto-cancelled: payment not confirmed within {threshold_hours}h"
            try:
                self.ledger.amend(
                    order_id,
                    status=OrderStatus.CANCELLED,
                    notes=_append_note(order.notes, note),
                    reason=note,
                    expected_status=OrderStatus.PENDING,
                )
            except (ValidationError, ObjectNotFoundError, LedgerStorageError) as exc:
                logger.warning("Failed to reap pending order", order_id=order_id, error=str(exc))
                report.failed.append(order_id)
                continue

            report.cancelled.append(order_id)
            logger.info("Cancelled stale pending order", order_id=order_id, created_at=str(order.created_at))

        logger.info("Reaping complete", cancelled=len(report.cancelled), failed=len(report.failed))
        return report


def _append_note(existing, note):
    return f"{existing}\n{note}" if existing else note
