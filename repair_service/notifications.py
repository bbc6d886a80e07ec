import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from . import email_templates
from .schemas import BookingNotice

logger = logging.getLogger("repair_service.notifications")


@dataclass
class Notification:
    kind: str  # "created" or "status_changed"
    booking: BookingNotice
    new_status: Optional[str] = None


class NotificationDispatcher:
    """
    Sends customer emails off the request path.

    notify_* only enqueue a message and return. A worker task running on the
    application's event loop picks messages up and sends each one in its own
    task, so many sends can be in flight at once. A send is attempted once;
    failures are logged with the tracking id and dropped.
    """

    def __init__(self, transport, shutdown_timeout: float = 10.0):
        self.transport = transport
        self.shutdown_timeout = shutdown_timeout
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self):
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run())
        logger.info("Notification dispatcher started.")

    async def stop(self):
        if not self.running:
            return
        try:
            await asyncio.wait_for(self.join(), timeout=self.shutdown_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Dropping {self._queue.qsize() + len(self._in_flight)} notifications still pending at shutdown.")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            logger.info("Notification dispatcher stopped.")
        leftover = list(self._in_flight)
        for task in leftover:
            task.cancel()
        await asyncio.gather(*leftover, return_exceptions=True)
        self._worker = None
        self._loop = None

    async def join(self):
        """Waits until every queued message has been sent or has failed."""
        await self._queue.join()
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    # --- Scheduling (callable from the loop or from a worker thread) ---

    def notify_created(self, booking: BookingNotice) -> None:
        self._schedule(Notification("created", booking))

    def notify_status_changed(self, booking: BookingNotice, new_status) -> None:
        self._schedule(Notification("status_changed", booking, str(getattr(new_status, "value", new_status))))

    def _schedule(self, notification: Notification) -> None:
        loop = self._loop
        if loop is None or loop.is_closed() or not self.running:
            logger.warning(f"Dispatcher not running, {notification.kind} email for {notification.booking.tracking_id} dropped.")
            return
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None
        if current is loop:
            self._queue.put_nowait(notification)
        else:
            try:
                loop.call_soon_threadsafe(self._queue.put_nowait, notification)
            except RuntimeError:
                # Loop closed after the check above
                logger.warning(f"Dispatcher shut down, {notification.kind} email for {notification.booking.tracking_id} dropped.")

    # --- Worker ---

    async def _run(self):
        while True:
            notification = await self._queue.get()
            try:
                task = asyncio.create_task(self._deliver(notification))
                self._in_flight.add(task)
                task.add_done_callback(self._in_flight.discard)
            finally:
                self._queue.task_done()

    def _render(self, notification: Notification) -> tuple[str, str]:
        booking = notification.booking
        if notification.kind == "created":
            return (
                email_templates.confirmation_subject(booking),
                email_templates.render_booking_confirmation(booking),
            )
        return (
            email_templates.status_update_subject(booking, notification.new_status),
            email_templates.render_status_update(booking, notification.new_status),
        )

    async def _deliver(self, notification: Notification):
        tracking_id = notification.booking.tracking_id
        try:
            subject, html = self._render(notification)
            sent = await asyncio.to_thread(self.transport.send, notification.booking.email, subject, html)
            if sent:
                logger.info(f"{notification.kind} email sent for {tracking_id}")
        except Exception as e:
            logger.error(f"Failed to send {notification.kind} email for {tracking_id}: {e}")


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher
