"""Concurrent fan-out of independent provider sends."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence, Union

from job_notifier.domain.models import EmailDispatch, TelegramDispatch
from job_notifier.logging import get_logger, run_in_log_context

from .models import STATUS_FAILED, STATUS_SENT, DeliveryError, DispatchResult

logger = get_logger(__name__, component="delivery")

Dispatch = Union[TelegramDispatch, EmailDispatch]
SendFunction = Callable[[Dispatch], Optional[int]]


def recipient_of(payload: Dispatch) -> str:
    if isinstance(payload, TelegramDispatch):
        return str(payload.chat_id)
    return payload.to


class DeliveryFanOut:
    """Runs one send per payload on a bounded thread pool.

    Every payload gets exactly one DispatchResult. A failing send never
    cancels or affects the others, and dispatch() only returns once all
    sends have settled.
    """

    def __init__(self, max_workers: int = 10, logger_instance: Optional[logging.Logger] = None):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers
        self.logger = logger_instance or logger

    def dispatch(
        self, channel: str, payloads: Sequence[Dispatch], send: SendFunction
    ) -> List[DispatchResult]:
        """Send all payloads for one channel concurrently.

        Args:
            channel: Channel name recorded on each result
            payloads: Payloads to send
            send: Callable performing a single send; returns the provider
                status code or raises

        Returns:
            One result per payload, in completion order
        """
        if not payloads:
            return []

        results: List[DispatchResult] = []
        workers = min(self.max_workers, len(payloads))
        attempt = run_in_log_context(self._attempt)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"{channel}-send") as executor:
            futures = [executor.submit(attempt, channel, payload, send) for payload in payloads]
            for future in as_completed(futures):
                results.append(future.result())

        return results

    def _attempt(self, channel: str, payload: Dispatch, send: SendFunction) -> DispatchResult:
        recipient = recipient_of(payload)
        user_id = payload.user_id

        try:
            status_code = send(payload)
        except DeliveryError as e:
            self.logger.error(
                f"{channel.capitalize()} delivery to {recipient} failed: {e}",
                extra={
                    "event": f"{channel}.send.failure",
                    "user_id": user_id,
                    "status_code": e.status_code,
                },
            )
            return DispatchResult(
                channel=channel,
                recipient=recipient,
                status=STATUS_FAILED,
                user_id=user_id,
                status_code=e.status_code,
                error=str(e),
            )
        except Exception as e:
            self.logger.error(
                f"Unexpected error delivering {channel} message to {recipient}: {e}",
                exc_info=True,
                extra={
                    "event": f"{channel}.send.failure",
                    "user_id": user_id,
                    "error_type": type(e).__name__,
                },
            )
            return DispatchResult(
                channel=channel,
                recipient=recipient,
                status=STATUS_FAILED,
                user_id=user_id,
                error=f"{type(e).__name__}: {e}",
            )

        self.logger.info(
            f"{channel.capitalize()} notification sent to {recipient}",
            extra={"event": f"{channel}.send.success", "user_id": user_id},
        )
        return DispatchResult(
            channel=channel,
            recipient=recipient,
            status=STATUS_SENT,
            user_id=user_id,
            status_code=status_code,
        )
