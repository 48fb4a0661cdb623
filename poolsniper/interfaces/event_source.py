"""Event source protocol — push stream of program log batches."""
from typing import AsyncIterator, Callable, Protocol

from ..models import PoolEvent


class EventSource(Protocol):
    """Yields log batches for one program until the connection closes.

    ``on_subscribed`` is called once the subscription request is on the wire.
    """

    def subscribe(
        self, program_id: str, on_subscribed: Callable[[], None] | None = None
    ) -> AsyncIterator[PoolEvent]: ...
