"""Protobuf timestamp helpers."""

from google.protobuf.timestamp_pb2 import Timestamp


def to_timestamp(nanoseconds: int) -> Timestamp:
    """Convert nanoseconds since the epoch to a protobuf Timestamp."""
    timestamp = Timestamp()
    timestamp.FromNanoseconds(nanoseconds)
    return timestamp
