"""Record publishing."""

from .sink import AirtableSink, JsonlSink, PublishFailure, PublishSink, to_record_fields

__all__ = [
    "AirtableSink",
    "JsonlSink",
    "PublishFailure",
    "PublishSink",
    "to_record_fields",
]
