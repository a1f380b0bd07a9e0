"""Publish/subscribe for cache updates."""

import logging
import threading
from typing import Callable

from job_sync.jobs.models import CanonicalJob

logger = logging.getLogger("job_sync.notifier")

JobsHandler = Callable[[list[CanonicalJob]], None]


class Subscription:
    """Handle returned by ``subscribe``; call ``unsubscribe`` to stop updates."""

    def __init__(self, registry: "SubscriberRegistry", handler: JobsHandler):
        self._registry = registry
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        self._registry.unsubscribe(self)


class SubscriberRegistry:
    def __init__(self):
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, handler: JobsHandler) -> Subscription:
        subscription = Subscription(self, handler)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
            subscription.active = False

    def clear(self) -> None:
        with self._lock:
            for subscription in self._subscriptions:
                subscription.active = False
            self._subscriptions = []

    def notify(self, jobs: list[CanonicalJob]) -> None:
        """Call every handler in registration order with its own copy of ``jobs``.

        A failing handler is logged and does not stop the others.
        """
        with self._lock:
            subscriptions = list(self._subscriptions)

        for subscription in subscriptions:
            try:
                subscription.handler(list(jobs))
            except Exception:
                logger.exception("Job update subscriber %r failed", subscription.handler)
