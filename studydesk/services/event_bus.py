"""Observer-style event bus and the alert center the UI drains into toasts"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Deque, Dict, List, Optional

from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)

ALERTS_TOPIC = "alerts"

ALERT_LEVELS = ("success", "error", "info", "warning")


class EventBusClosedError(RuntimeError):
    pass


class EventBus:
    """Synchronous publish/subscribe keyed by topic name.

    Owned by one AppContext; closing it drops every subscriber.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Any], None]]] = defaultdict(list)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, topic: str, handler: Callable[[Any], None]) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it"""
        if self._closed:
            raise EventBusClosedError("Event bus is closed")
        self._subscribers[topic].append(handler)

        def unsubscribe():
            handlers = self._subscribers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, topic: str, payload: Any = None) -> int:
        """Deliver payload to every subscriber of topic; returns the number notified"""
        if self._closed:
            logger.warning("Dropped %s event published after close", topic)
            return 0
        handlers = list(self._subscribers.get(topic, []))
        for handler in handlers:
            handler(payload)
        return len(handlers)

    def close(self):
        self._subscribers.clear()
        self._closed = True


_alert_ids = count()


@dataclass(frozen=True)
class Alert:
    message: str
    level: str = "info"
    retry_available: bool = False
    id: str = field(default_factory=lambda: f"alert-{next(_alert_ids)}")


class AlertCenter:
    """Buffers alerts published on the bus until the UI renders them"""

    def __init__(self, bus: EventBus, max_pending: int = 20):
        self._bus = bus
        self._pending: Deque[Alert] = deque(maxlen=max_pending)
        self._unsubscribe = bus.subscribe(ALERTS_TOPIC, self._on_alert)

    def _on_alert(self, alert: Alert):
        self._pending.append(alert)

    def show(self, message: str, level: str = "info", retry_available: bool = False) -> Optional[Alert]:
        if level not in ALERT_LEVELS:
            raise ValueError(f"Unknown alert level: {level}")
        alert = Alert(message=message, level=level, retry_available=retry_available)
        if not self._bus.publish(ALERTS_TOPIC, alert):
            return None
        return alert

    def success(self, message: str):
        return self.show(message, "success")

    def error(self, message: str, retry_available: bool = False):
        return self.show(message, "error", retry_available)

    def info(self, message: str):
        return self.show(message, "info")

    def warning(self, message: str):
        return self.show(message, "warning")

    def drain(self) -> List[Alert]:
        alerts = list(self._pending)
        self._pending.clear()
        return alerts

    def close(self):
        self._unsubscribe()
        self._pending.clear()
