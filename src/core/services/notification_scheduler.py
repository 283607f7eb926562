"""
Notification scheduler.

Walks every unsent, unpaid reminder across tenants and emits one
PAYMENT_REMINDER notification for each reminder whose fire date
(due date minus the reminder's offset) has arrived.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from src.config import get_logger
from src.core.entities.payment_reminder import PaymentReminder, utcnow
from src.core.interfaces.notification import INotificationSink
from src.core.interfaces.storage import IPaymentReminderStore
from src.core.services.reminder_messages import ReminderMessageFormatter

logger = get_logger(__name__)

DEFAULT_CLAIM_LEASE_SECONDS = 300


@dataclass
class ReminderProcessingError:
    reminder_id: str
    message: str


@dataclass
class ProcessResult:
    """Outcome of one scheduler pass."""

    sent: int = 0
    skipped: int = 0
    errors: list[ReminderProcessingError] = field(default_factory=list)


class NotificationScheduler:
    """
    Layer-pure scheduler service.

    Before sending, a reminder is claimed with a short lease so two
    overlapping runs cannot both notify for it. The reminder is marked
    sent only after the sink accepted the notification; a failed send
    releases the claim and the reminder is retried on the next run.
    """

    def __init__(
        self,
        reminder_store: IPaymentReminderStore,
        sink: INotificationSink,
        formatter: ReminderMessageFormatter | None = None,
        claim_lease_seconds: int = DEFAULT_CLAIM_LEASE_SECONDS,
    ) -> None:
        self._reminders = reminder_store
        self._sink = sink
        self._formatter = formatter or ReminderMessageFormatter()
        self._lease = timedelta(seconds=claim_lease_seconds)

    async def process(self, now: datetime | None = None) -> ProcessResult:
        """
        Run one scheduler pass.

        Failures are isolated per reminder: each one is logged and
        collected and the pass continues with the next reminder.

        Args:
            now: Evaluation time; defaults to the current UTC time

        Returns:
            Sent count, count of reminders not yet due, and per-reminder errors
        """
        now = now or utcnow()
        today = now.date()
        result = ProcessResult()

        pending = await self._reminders.list_pending_notifications()
        for reminder in pending:
            if not reminder.is_due_for_notification(today):
                result.skipped += 1
                continue

            try:
                if await self._notify(reminder, now):
                    result.sent += 1
            except Exception as e:
                logger.error(
                    "reminder_notification_failed",
                    reminder_id=reminder.id,
                    tenant_id=reminder.tenant_id,
                    error=str(e),
                )
                result.errors.append(
                    ReminderProcessingError(reminder_id=reminder.id, message=str(e))
                )

        logger.info(
            "reminder_processing_complete",
            pending=len(pending),
            sent=result.sent,
            skipped=result.skipped,
            errors=len(result.errors),
        )
        return result

    async def _notify(self, reminder: PaymentReminder, now: datetime) -> bool:
        """Claim, send and mark one reminder. Returns False if another run holds it."""
        claimed = await self._reminders.claim_for_notification(
            reminder.id, now, now + self._lease
        )
        if not claimed:
            logger.info("reminder_claim_skipped", reminder_id=reminder.id)
            return False

        notification = self._formatter.build(reminder)
        try:
            await self._sink.send(notification)
        except Exception:
            await self._release(reminder.id)
            raise

        await self._reminders.mark_sent(reminder.id, now)
        logger.info(
            "reminder_notification_sent",
            reminder_id=reminder.id,
            tenant_id=reminder.tenant_id,
            notification_id=notification.id,
        )
        return True

    async def _release(self, reminder_id: str) -> None:
        try:
            await self._reminders.release_claim(reminder_id)
        except Exception:
            # The lease still expires on its own
            logger.warning("reminder_claim_release_failed", reminder_id=reminder_id, exc_info=True)
