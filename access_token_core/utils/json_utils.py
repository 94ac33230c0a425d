"""
JSON helpers for structured log entries.

Log context can carry datetimes, enums, exceptions and Pydantic models; none
of these may break a queue message, so anything unknown is written as its
``repr``.
"""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any


class LogEntryEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, BaseException):
            return {"type": type(obj).__name__, "message": str(obj)}
        if hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json")
        if isinstance(obj, (set, frozenset)):
            return sorted(obj, key=str)
        return repr(obj)


def dumps(obj: Any, **kwargs) -> str:
    """Serialize a log entry; never fails on unknown value types."""
    return json.dumps(obj, cls=LogEntryEncoder, **kwargs)

