"""
Process Payment Reminders Use Case.

Runs one notification scheduler pass across all tenants.
"""

from datetime import datetime

from src.config import get_settings, job_context
from src.core.interfaces.notification import INotificationSink
from src.core.interfaces.storage import IPaymentReminderStore
from src.core.services.notification_scheduler import NotificationScheduler, ProcessResult
from src.core.services.reminder_messages import ReminderMessageFormatter


class ProcessPaymentRemindersUseCase:
    """Use case wiring the scheduler to the ledger and the configured sink."""

    def __init__(
        self,
        reminder_store: IPaymentReminderStore | None = None,
        sink: INotificationSink | None = None,
    ):
        self._reminder_store = reminder_store
        self._sink = sink

    async def _get_reminder_store(self) -> IPaymentReminderStore:
        if self._reminder_store is None:
            from src.infrastructure.storage.sqlite import get_payment_reminder_store
            self._reminder_store = await get_payment_reminder_store()
        return self._reminder_store

    def _get_sink(self) -> INotificationSink:
        if self._sink is None:
            from src.infrastructure.notifications import get_notification_sink
            self._sink = get_notification_sink()
        return self._sink

    async def execute(self, now: datetime | None = None) -> ProcessResult:
        """
        Emit notifications for every reminder whose fire date has arrived.

        Args:
            now: Evaluation time; defaults to the current UTC time

        Returns:
            ProcessResult with the sent count and per-reminder errors
        """
        settings = get_settings()
        scheduler = NotificationScheduler(
            reminder_store=await self._get_reminder_store(),
            sink=self._get_sink(),
            formatter=ReminderMessageFormatter(locale=settings.notifications.locale),
            claim_lease_seconds=settings.scheduler.claim_lease_seconds,
        )
        with job_context("reminder_process"):
            return await scheduler.process(now=now)
