"""
Progress Broadcaster
====================
Fans out run events to subscribers grouped by run id and by tenant id.
Asset alerts go to a separate per-tenant group that subscribers opt into.

Delivery is best-effort and at-most-once: a subscriber only receives events
announced while it is subscribed, plus the latest snapshot when it
subscribes to a run. Delivery failures are logged and never reach the
announcing run loop.
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable, Dict, Optional, Set

from core.config import SUBSCRIBER_QUEUE_SIZE
from core.errors import BroadcastError
from simulation.models import RunState
from .events import RunEvent, TENANT_NOTICES, run_state, tenant_notification
from .registry import RunRegistry

logger = logging.getLogger(__name__)


class Subscriber(ABC):
    """Receiver of run events. deliver() must not block."""

    @abstractmethod
    def deliver(self, event: RunEvent) -> None:
        """Accept one event, or raise BroadcastError."""


class QueueSubscriber(Subscriber):
    """Buffers events in a bounded asyncio queue for a streaming consumer."""

    def __init__(self, maxsize: int = SUBSCRIBER_QUEUE_SIZE):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, event: RunEvent) -> None:
        if self._closed:
            raise BroadcastError("Subscriber is disconnected")
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            raise BroadcastError(
                "Subscriber queue is full",
                details={"queue_size": self._queue.maxsize},
            )

    async def get(self) -> RunEvent:
        return await self._queue.get()

    def get_nowait(self) -> Optional[RunEvent]:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def close(self) -> None:
        self._closed = True

    def __aiter__(self):
        return self

    async def __anext__(self) -> RunEvent:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        return await self._queue.get()


class CallbackSubscriber(Subscriber):
    """Invokes a plain callable for each event."""

    def __init__(self, callback: Callable[[RunEvent], None]):
        self._callback = callback

    def deliver(self, event: RunEvent) -> None:
        self._callback(event)


class ProgressBroadcaster:
    """Explicit subscriber registry keyed by run id and by tenant id."""

    def __init__(self, registry: RunRegistry):
        self._registry = registry
        self._run_subscribers: Dict[str, Set[Subscriber]] = defaultdict(set)
        self._tenant_subscribers: Dict[str, Set[Subscriber]] = defaultdict(set)
        self._alert_subscribers: Dict[str, Set[Subscriber]] = defaultdict(set)
        self._lock = threading.Lock()

    def join_tenant(self, tenant_id: str, subscriber: Subscriber) -> None:
        with self._lock:
            self._tenant_subscribers[tenant_id].add(subscriber)
        logger.debug(f"Subscriber joined tenant {tenant_id}")

    def leave_tenant(self, tenant_id: str, subscriber: Subscriber) -> None:
        with self._lock:
            subscribers = self._tenant_subscribers.get(tenant_id)
            if subscribers is not None:
                subscribers.discard(subscriber)
                if not subscribers:
                    del self._tenant_subscribers[tenant_id]

    def subscribe_alerts(self, tenant_id: str, subscriber: Subscriber) -> None:
        """Opt in to a tenant's asset alerts, kept apart from run notifications."""
        with self._lock:
            self._alert_subscribers[tenant_id].add(subscriber)
        logger.debug(f"Subscriber joined alerts for tenant {tenant_id}")

    def unsubscribe_alerts(self, tenant_id: str, subscriber: Subscriber) -> None:
        with self._lock:
            subscribers = self._alert_subscribers.get(tenant_id)
            if subscribers is not None:
                subscribers.discard(subscriber)
                if not subscribers:
                    del self._alert_subscribers[tenant_id]

    def subscribe_run(self, run_id: str, subscriber: Subscriber) -> Optional[RunState]:
        """
        Subscribe to a run's events.

        Delivers the run's current state to the subscriber immediately when
        the registry holds one, and returns it.
        """
        with self._lock:
            self._run_subscribers[run_id].add(subscriber)
        logger.debug(f"Subscriber joined run {run_id}")

        state = self._registry.get(run_id)
        if state is not None:
            self._deliver(subscriber, run_state(state))
        return state

    def unsubscribe_run(self, run_id: str, subscriber: Subscriber) -> None:
        with self._lock:
            subscribers = self._run_subscribers.get(run_id)
            if subscribers is not None:
                subscribers.discard(subscriber)
                if not subscribers:
                    del self._run_subscribers[run_id]

    def subscriber_count(
        self,
        run_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
        alerts_tenant_id: Optional[str] = None
    ) -> int:
        with self._lock:
            if alerts_tenant_id is not None:
                return len(self._alert_subscribers.get(alerts_tenant_id, ()))
            if run_id is not None:
                return len(self._run_subscribers.get(run_id, ()))
            if tenant_id is not None:
                return len(self._tenant_subscribers.get(tenant_id, ()))
            return 0

    def announce(self, run_id: str, event: RunEvent) -> None:
        """
        Deliver an event to the run's subscribers.

        Terminal events also send a tenant notification to the subscribers
        of the run's tenant.
        """
        with self._lock:
            subscribers = list(self._run_subscribers.get(run_id, ()))
        for subscriber in subscribers:
            self._deliver(subscriber, event)

        if event.is_terminal:
            state = self._registry.get(run_id)
            if state is not None and state.tenant_id:
                notice_type, message = TENANT_NOTICES[event.kind]
                if state.error and notice_type == "failed":
                    message = f"{message}: {state.error}"
                self._broadcast_tenant(
                    state.tenant_id,
                    tenant_notification(notice_type, run_id, message),
                )

    def alert_tenant(self, tenant_id: str, alert: RunEvent) -> None:
        """Deliver an asset alert to the tenant's alert subscribers."""
        with self._lock:
            subscribers = list(self._alert_subscribers.get(tenant_id, ()))
        for subscriber in subscribers:
            self._deliver(subscriber, alert)

    def _broadcast_tenant(self, tenant_id: str, event: RunEvent) -> None:
        with self._lock:
            subscribers = list(self._tenant_subscribers.get(tenant_id, ()))
        for subscriber in subscribers:
            self._deliver(subscriber, event)

    def _deliver(self, subscriber: Subscriber, event: RunEvent) -> None:
        try:
            subscriber.deliver(event)
        except BroadcastError as e:
            logger.warning(f"Dropped {event.kind.value} event: {e.message}")
        except Exception:
            logger.exception(f"Subscriber failed on {event.kind.value} event")
