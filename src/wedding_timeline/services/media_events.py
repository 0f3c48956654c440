"""In-process publish/subscribe bus for application media signals."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

MEDIA_UPLOADED = "media-uploaded"

MediaEventHandler = Callable[[dict[str, object] | None], Awaitable[None]]

logger = logging.getLogger(__name__)


@dataclass
class MediaEventBus:
    """Routes named signals to async handlers within one process."""

    _handlers: dict[str, list[MediaEventHandler]] = field(default_factory=dict)

    def subscribe(self, topic: str, handler: MediaEventHandler) -> Callable[[], None]:
        """Register a handler and return a callable that removes it."""
        self._handlers.setdefault(topic, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    async def publish(
        self, topic: str, payload: dict[str, object] | None = None
    ) -> int:
        """Notify every handler of a topic and return how many were called."""
        handlers = list(self._handlers.get(topic, []))
        for handler in handlers:
            try:
                await handler(payload)
            except Exception:
                logger.exception("Media event handler failed for %s", topic)
        return len(handlers)

    def handler_count(self, topic: str) -> int:
        """Return the number of handlers registered for a topic."""
        return len(self._handlers.get(topic, []))
