"""
Claim Submission Notifier.

Process-wide publish point for the single "claim submitted" event.  The
lifecycle service publishes; any number of observers subscribe without
the submitter knowing who is listening.

Delivery rules:

- Only subscribers registered at publish time receive an event.  There is
  no persistence and no retry.
- Events are handed to subscribers in subscription order, and each
  subscriber sees events in publish order.
- Every subscriber gets its own deep copy of the claim.
- The publisher never runs subscriber code and never waits on it:
    * plain callbacks run on a per-subscriber daemon worker fed by a
      bounded queue; an exception is logged and the worker carries on;
    * coroutine callbacks are scheduled as tasks on the running loop;
    * queue subscribers receive ``put_nowait``.
  A full queue (worker backlog or ``asyncio.Queue``) drops the event with
  a warning.

Subscription handles are independent of any window or session lifetime:
call ``Subscription.unsubscribe()`` (or use the handle as a context
manager) when the observer goes away.  ``flush()`` / ``drain()`` wait for
handed-off events to finish, for tests and orderly shutdown.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import queue
import threading
import time
from typing import Awaitable, Callable, Optional, Union

from contract_claims.logger import StructuredLogger
from contract_claims.models.claim import Claim
from contract_claims.services.base_service import BaseService

ClaimCallback = Callable[[Claim], Union[None, Awaitable[None]]]


class _CallbackWorker:
    """Daemon thread that feeds one plain callback from a bounded queue.

    A callback that hangs only stalls its own worker; the backlog fills up
    and further events for that subscriber are dropped.
    """

    _POLL_SECONDS: float = 0.2

    def __init__(
        self,
        token: int,
        callback: ClaimCallback,
        maxsize: int,
        logger: StructuredLogger,
    ) -> None:
        self._token = token
        self._callback = callback
        self._logger = logger
        self._backlog: queue.Queue[Claim] = queue.Queue(maxsize=maxsize)
        self._stop_event = threading.Event()
        self._idle = threading.Condition()
        self._in_flight = 0
        self._thread = threading.Thread(
            target=self._run_loop,
            name=f"claim-subscriber-{token}",
            daemon=True,
        )
        self._thread.start()

    def offer(self, claim: Claim) -> bool:
        with self._idle:
            try:
                self._backlog.put_nowait(claim)
            except queue.Full:
                return False
            self._in_flight += 1
        return True

    def stop(self) -> None:
        """Ask the worker to exit; events not yet started are discarded."""
        self._stop_event.set()

    def wait_idle(self, deadline: Optional[float]) -> bool:
        with self._idle:
            while self._in_flight:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._idle.wait(remaining)
        return True

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                claim = self._backlog.get(timeout=self._POLL_SECONDS)
            except queue.Empty:
                continue
            try:
                if not self._stop_event.is_set():
                    self._deliver(claim)
            finally:
                self._mark_done()

        while True:
            try:
                self._backlog.get_nowait()
            except queue.Empty:
                return
            self._mark_done()

    def _mark_done(self) -> None:
        with self._idle:
            self._in_flight -= 1
            self._idle.notify_all()

    def _deliver(self, claim: Claim) -> None:
        try:
            result = self._callback(claim)
        except Exception as exc:
            self._logger.error(
                "Notifier subscriber %d failed for claim %s: %s",
                self._token,
                claim.id,
                exc,
                exc_info=True,
            )
            return
        if inspect.isawaitable(result):
            self._logger.warning(
                "Notifier subscriber %d returned an awaitable for claim %s; "
                "subscribe an 'async def' callback to have it awaited.",
                self._token,
                claim.id,
            )
            if inspect.iscoroutine(result):
                result.close()


class Subscription:
    """Registration handle returned by :class:`ClaimNotifier`.

    ``queue`` is set only for subscriptions created with
    :meth:`ClaimNotifier.subscribe_queue`.
    """

    def __init__(
        self,
        notifier: ClaimNotifier,
        token: int,
        callback: Optional[ClaimCallback] = None,
        queue: Optional[asyncio.Queue[Claim]] = None,
        worker: Optional[_CallbackWorker] = None,
    ) -> None:
        self._notifier = notifier
        self.token = token
        self.callback = callback
        self.queue = queue
        self._worker = worker

    @property
    def active(self) -> bool:
        return self._notifier.is_subscribed(self)

    def unsubscribe(self) -> bool:
        """Remove this subscription.  Returns ``False`` if already removed."""
        return self._notifier.unsubscribe(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class ClaimNotifier(BaseService):
    """Fan-out channel for submitted claims.

    Parameters
    ----------
    logger:
        Structured logger instance.
    queue_size:
        Capacity of each ``asyncio.Queue`` from :meth:`subscribe_queue` and
        of each plain callback's backlog.
    """

    def __init__(self, logger: StructuredLogger, queue_size: int = 100) -> None:
        super().__init__(logger)
        self._queue_size = queue_size
        self._lock = threading.Lock()
        self._subscriptions: dict[int, Subscription] = {}
        self._tokens = itertools.count(1)
        self._pending_tasks: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def subscribe(self, callback: ClaimCallback) -> Subscription:
        """Register *callback* for future submissions.

        ``async def`` callbacks run as tasks on the publisher's event loop;
        anything else runs on its own worker thread.
        """
        with self._lock:
            token = next(self._tokens)
            worker = (
                None
                if inspect.iscoroutinefunction(callback)
                else _CallbackWorker(token, callback, self._queue_size, self._logger)
            )
            subscription = Subscription(self, token, callback=callback, worker=worker)
            self._subscriptions[token] = subscription
        self._logger.debug("Notifier subscriber %d added.", token)
        return subscription

    def subscribe_queue(self, maxsize: Optional[int] = None) -> Subscription:
        """Register a bounded ``asyncio.Queue`` that receives each claim."""
        claims: asyncio.Queue[Claim] = asyncio.Queue(
            maxsize=self._queue_size if maxsize is None else maxsize
        )
        with self._lock:
            subscription = Subscription(self, next(self._tokens), queue=claims)
            self._subscriptions[subscription.token] = subscription
        self._logger.debug("Notifier queue subscriber %d added.", subscription.token)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        with self._lock:
            removed = self._subscriptions.pop(subscription.token, None)
        if removed is None:
            return False
        if removed._worker is not None:
            removed._worker.stop()
        self._logger.debug("Notifier subscriber %d removed.", subscription.token)
        return True

    def is_subscribed(self, subscription: Subscription) -> bool:
        with self._lock:
            return subscription.token in self._subscriptions

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def close(self) -> None:
        """Remove every subscription and stop their workers."""
        with self._lock:
            subscriptions = list(self._subscriptions.values())
        for subscription in subscriptions:
            self.unsubscribe(subscription)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def publish(self, claim: Claim) -> int:
        """Hand *claim* to every current subscriber without running them.

        Returns the number of subscribers the event was handed to
        (queued events and scheduled tasks count; drops and skips do not).
        """
        with self._lock:
            snapshot = list(self._subscriptions.values())

        delivered = 0
        for subscription in snapshot:
            payload = claim.model_copy(deep=True)
            if subscription.queue is not None:
                delivered += self._offer(subscription, payload)
            elif subscription._worker is not None:
                delivered += self._hand_off(subscription, payload)
            elif subscription.callback is not None:
                delivered += self._schedule(subscription, payload)

        self._logger.debug(
            "Published claim %s to %d/%d subscribers.",
            claim.id,
            delivered,
            len(snapshot),
        )
        return delivered

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Block until every plain callback has finished its handed-off events.

        Returns ``False`` if *timeout* seconds pass first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._lock:
            workers = [s._worker for s in self._subscriptions.values() if s._worker]
        return all(worker.wait_idle(deadline) for worker in workers)

    async def drain(self) -> None:
        """Wait for every scheduled async delivery and worker backlog to finish."""
        while True:
            pending = [task for task in self._pending_tasks if not task.done()]
            if not pending:
                break
            await asyncio.gather(*pending, return_exceptions=True)
        await asyncio.to_thread(self.flush)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _offer(self, subscription: Subscription, claim: Claim) -> int:
        try:
            subscription.queue.put_nowait(claim)  # type: ignore[union-attr]
            return 1
        except asyncio.QueueFull:
            self._logger.warning(
                "Notifier queue %d is full; dropped claim %s.",
                subscription.token,
                claim.id,
            )
            return 0

    def _hand_off(self, subscription: Subscription, claim: Claim) -> int:
        if subscription._worker.offer(claim):  # type: ignore[union-attr]
            return 1
        self._logger.warning(
            "Notifier subscriber %d is backed up; dropped claim %s.",
            subscription.token,
            claim.id,
        )
        return 0

    def _schedule(self, subscription: Subscription, claim: Claim) -> int:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.warning(
                "No running event loop; async subscriber %d skipped for claim %s.",
                subscription.token,
                claim.id,
            )
            return 0

        task = loop.create_task(_await(subscription.callback, claim))  # type: ignore[arg-type]
        self._pending_tasks.add(task)
        task.add_done_callback(lambda t, token=subscription.token: self._task_done(t, token))
        return 1

    def _task_done(self, task: asyncio.Task[None], token: int) -> None:
        self._pending_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error(
                "Async notifier subscriber %d failed: %s",
                token,
                exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )


async def _await(callback: Callable[[Claim], Awaitable[None]], claim: Claim) -> None:
    await callback(claim)
