"""Real-time event contract.

The core only ever calls EventPublisher.publish(topic, event_type, payload).
Delivery (ordering, retries, fan-out to sockets) belongs to the bus
implementation, which is constructed at startup and injected, never looked
up from module state.
"""

from dataclasses import asdict, dataclass
from typing import Any, Protocol

PRICE_UPDATE = "price:update"
WAGER_PLACED = "wager:placed"
SETTLEMENT_DONE = "settlement:done"

GLOBAL_TOPIC = "match:all"


def match_topic(match_id: str) -> str:
    return f"match:{match_id}"


def user_topic(account_id: str) -> str:
    return f"user:{account_id}"


@dataclass(frozen=True)
class RealtimeEvent:
    type: str
    topic: str
    data: dict[str, Any]
    timestamp: int  # epoch ms

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class EventPublisher(Protocol):
    async def publish(self, topic: str, event_type: str, payload: dict[str, Any]) -> None: ...

