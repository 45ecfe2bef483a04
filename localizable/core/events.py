# File: localizable/core/events.py

from typing import (
    Dict,
    Any,
    Callable,
    List,
    Optional,
    Union,
    TypeVar,
    Type,
)
from collections import defaultdict
from dataclasses import dataclass, field, asdict
from datetime import datetime
import uuid
import asyncio
import logging

logger = logging.getLogger(__name__)

T_event = TypeVar("T_event", bound="DomainEvent")
EventHandler = Callable[[T_event], None]


# --- Base DomainEvent ---
@dataclass(eq=False)
class DomainEvent:
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["timestamp"] = self.timestamp.isoformat()
        result["event_type"] = self.__class__.__name__
        return result


# --- Host lifecycle notifications ---
@dataclass(eq=False)
class EntityRetrievedEvent(DomainEvent):
    """The host loaded an entity; ``locale`` is the locale to overlay."""

    entity: Any = None
    locale: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.__class__.__name__,
            "entity": repr(self.entity),
            "locale": self.locale,
        }


@dataclass(eq=False)
class EntityDeletedEvent(DomainEvent):
    entity_id: Optional[int] = None
    entity_type: str = ""


# --- Event Bus Class ---
class EventBus:
    """
    Event bus for host lifecycle notifications.

    Handlers are keyed by event class name. Handler errors are logged and do
    not stop delivery to the remaining handlers.

    Usage:
        bus.subscribe(EntityDeletedEvent, handle_entity_deleted)
        bus.publish(EntityDeletedEvent(entity_type="Post", entity_id=1))
    """

    def __init__(self):
        self.subscribers: Dict[str, List[Callable]] = defaultdict(list)

    def publish(self, event: DomainEvent) -> None:
        """
        Publish an event synchronously to all registered handlers.

        Args:
            event: The domain event to publish
        """
        event_type = type(event).__name__
        logger.debug(f"Publishing sync event {event_type} ID {event.event_id}")
        subscribers_copy = list(self.subscribers.get(event_type, []))
        for handler in subscribers_copy:
            self._call_handler_sync(handler, event, event_type)

    def _call_handler_sync(self, handler: Callable, event: DomainEvent, event_type: str):
        try:
            if asyncio.iscoroutinefunction(handler):
                logger.warning(f"Sync call to async handler {handler.__name__} for {event_type}. Use publish_async.")
            else:
                handler(event)
        except Exception as e:
            logger.error(f"Error in sync handler {getattr(handler, '__name__', repr(handler))} "
                         f"for {event_type} ID {event.event_id}: {e}", exc_info=True)

    async def publish_async(self, event: DomainEvent) -> None:
        """
        Publish an event asynchronously to all registered handlers.

        Sync handlers run in a worker thread via ``asyncio.to_thread``.
        """
        event_type = type(event).__name__
        logger.debug(f"Publishing async event {event_type} ID {event.event_id}")
        subscribers_copy = list(self.subscribers.get(event_type, []))
        tasks = []
        for handler in subscribers_copy:
            if asyncio.iscoroutinefunction(handler):
                tasks.append(asyncio.create_task(handler(event)))
            else:
                tasks.append(asyncio.create_task(asyncio.to_thread(handler, event)))
        if tasks:
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for handler, result in zip(subscribers_copy, results):
                if isinstance(result, Exception):
                    logger.error(f"Error in handler '{getattr(handler, '__name__', repr(handler))}' "
                                 f"for {event_type} ID {event.event_id}: {result}", exc_info=result)

    def subscribe(self, event_type: Union[str, Type[DomainEvent]], handler: Callable) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: Event class or event type name string
            handler: Callable to handle the event (sync or async)
        """
        event_type_name = event_type.__name__ if isinstance(event_type, type) else str(event_type)
        self.subscribers[event_type_name].append(handler)
        logger.debug(f"Subscribed handler {getattr(handler, '__name__', repr(handler))} to {event_type_name}")

    def unsubscribe(self, event_type: Union[str, Type[DomainEvent]], handler: Callable) -> bool:
        """
        Unsubscribe from an event type.

        Returns:
            True if handler was found and removed, False otherwise
        """
        event_type_name = event_type.__name__ if isinstance(event_type, type) else str(event_type)
        if event_type_name in self.subscribers:
            try:
                self.subscribers[event_type_name].remove(handler)
                logger.debug(
                    f"Unsubscribed handler {getattr(handler, '__name__', repr(handler))} from {event_type_name}")
                return True
            except ValueError:
                return False
        return False

    def clear_subscriptions(self) -> None:
        self.subscribers.clear()
        logger.debug("Cleared all event subscriptions")


# Global event bus instance
global_event_bus = EventBus()
