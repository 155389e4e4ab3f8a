"""JSON wire encoding for broker messages."""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict


class _EventJSONEncoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, Decimal):
            return str(o)
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, (set, frozenset)):
            return sorted(o)
        return super().default(o)


def encode(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload, cls=_EventJSONEncoder, ensure_ascii=False).encode("utf-8")


def decode(body) -> Any:
    """Decode a message body. Raises ValueError on invalid UTF-8 or JSON."""
    if isinstance(body, (bytes, bytearray)):
        body = bytes(body).decode("utf-8")
    return json.loads(body)
