import logging
from typing import Any, Callable, Tuple

logger = logging.getLogger(__name__)


class ScheduledTask:
    """A deferred callback that can be cancelled until it fires."""

    def __init__(self, name: str, delay: float, callback: Callable, args: Tuple[Any, ...] = ()):
        self.name = name
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        if not self.pending:
            return False
        self.cancelled = True
        return True

    def fire(self) -> bool:
        if not self.pending:
            return False
        self.fired = True
        self.callback(*self.args)
        return True

    def __repr__(self) -> str:
        state = 'cancelled' if self.cancelled else 'fired' if self.fired else 'pending'
        return f"<ScheduledTask {self.name} delay={self.delay}s {state}>"


class BackgroundScheduler:
    """Runs scheduled tasks on Socket.IO background tasks.

    Uses socketio.sleep so the wait cooperates with whichever async mode
    Flask-SocketIO picked (threading, eventlet or gevent).
    """

    def __init__(self, socketio):
        self.socketio = socketio

    def schedule(self, delay: float, callback: Callable, *args, name: str = 'task') -> ScheduledTask:
        task = ScheduledTask(name, delay, callback, args)

        def _runner():
            self.socketio.sleep(delay)
            if task.pending:
                logger.info(f"[timer-fire] {task.name}")
            task.fire()

        self.socketio.start_background_task(_runner)
        logger.info(f"[timer-set] {name} delay={delay}s")
        return task
