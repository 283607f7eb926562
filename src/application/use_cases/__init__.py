"""Application use cases."""

from src.application.use_cases.process_payment_reminders import (
    ProcessPaymentRemindersUseCase,
)
from src.application.use_cases.sync_payment_reminders import SyncPaymentRemindersUseCase

__all__ = [
    "SyncPaymentRemindersUseCase",
    "ProcessPaymentRemindersUseCase",
]
