"""
HTTP webhook notification sink.

Posts each notification as JSON to a configured endpoint. The reminder id is
forwarded as ``Idempotency-Key`` so a receiver can drop the duplicates that
at-least-once delivery may produce.
"""

from typing import Any

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_logger, get_settings
from src.core.entities.notification import Notification
from src.core.exceptions import ConfigurationError, NotificationDeliveryError
from src.core.interfaces.notification import INotificationSink

logger = get_logger(__name__)


class WebhookNotificationSink(INotificationSink):
    """
    Notification sink that forwards to an HTTP endpoint.

    Transport failures (connect errors, timeouts) are retried with
    exponential backoff; an HTTP error status is not retried.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
    ):
        settings = get_settings().notifications
        self.url = url or settings.webhook_url
        self.timeout = timeout or settings.timeout
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.retry_delay
        self._transport = transport

        if not self.url:
            raise ConfigurationError(
                "NOTIFY_WEBHOOK_URL must be set for the webhook notification backend",
                code="WEBHOOK_URL_MISSING",
            )

    def _get_retry_decorator(self) -> Any:
        return retry(
            stop=stop_after_attempt(max(1, self.max_retries)),
            wait=wait_exponential(
                multiplier=self.retry_delay,
                min=self.retry_delay,
                max=self.retry_delay * 8,
            ),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "notification_webhook_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    def _payload(self, notification: Notification) -> dict:
        return {
            "id": notification.id,
            "tenant_id": notification.tenant_id,
            "user_id": notification.user_id,
            "type": notification.type.value,
            "title": notification.title,
            "message": notification.message,
            "meta": notification.meta,
            "created_at": notification.created_at.isoformat(),
        }

    async def _post(self, payload: dict, headers: dict[str, str]) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            return await client.post(self.url, json=payload, headers=headers)

    async def send(self, notification: Notification) -> Notification:
        """POST the notification; any non-2xx answer is a delivery failure."""
        headers = {"Content-Type": "application/json"}
        if notification.idempotency_key:
            headers["Idempotency-Key"] = notification.idempotency_key

        try:
            response = await self._get_retry_decorator()(self._post)(
                self._payload(notification), headers
            )
        except httpx.HTTPError as e:
            raise NotificationDeliveryError("webhook", str(e)) from e

        if response.status_code >= 300:
            raise NotificationDeliveryError(
                "webhook",
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        logger.info(
            "notification_webhook_delivered",
            notification_id=notification.id,
            tenant_id=notification.tenant_id,
            status=response.status_code,
        )
        return notification
