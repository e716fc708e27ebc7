from src.taskboard.infrastructure.streams.feed import StreamsChangeFeed
from src.taskboard.infrastructure.streams.serializers import decode_event, encode_event

__all__ = [
    "StreamsChangeFeed",
    "decode_event",
    "encode_event",
]
