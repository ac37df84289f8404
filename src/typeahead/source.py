from __future__ import annotations
import logging
from typing import Callable, Optional

from .models import QueryEvent

log = logging.getLogger(__name__)

QueryHandler = Callable[[QueryEvent], None]


class QuerySource:
    """
    Turns raw input changes into QueryEvents with increasing sequence numbers.
    Every call is forwarded, identical text included; suppression is the matcher's job.
    """

    def __init__(self, handler: Optional[QueryHandler] = None) -> None:
        self._handler = handler
        self._counter = 0

    def connect(self, handler: Optional[QueryHandler]) -> None:
        self._handler = handler

    @property
    def last_seq(self) -> int:
        return self._counter

    def emit(self, text: str) -> QueryEvent:
        self._counter += 1
        event = QueryEvent(text=text, seq=self._counter)
        if self._handler is None:
            log.debug("No handler connected; dropping query #%d", event.seq)
            return event
        self._handler(event)
        return event
