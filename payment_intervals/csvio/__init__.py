from .reader import MalformedBatchError, inspect_table, read_event_table, read_successful_ids
from .source import ReadError, acquire_text

__all__ = [
    "MalformedBatchError",
    "ReadError",
    "acquire_text",
    "inspect_table",
    "read_event_table",
    "read_successful_ids",
]
