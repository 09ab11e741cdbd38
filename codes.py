import random
import threading
import time
from typing import Collection

# No I, O, 0 or 1: they are easy to misread on a boarding pass
CONFIRMATION_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CONFIRMATION_PREFIX = "FD"
CONFIRMATION_LENGTH = 6
MAX_CONFIRMATION_ATTEMPTS = 20

_last_ms = 0
_id_lock = threading.Lock()


def timestamp_id(prefix: str = "") -> str:
    """Millisecond timestamp id, strictly increasing within the process."""
    global _last_ms
    with _id_lock:
        now = int(time.time() * 1000)
        _last_ms = max(now, _last_ms + 1)
        return f"{prefix}{_last_ms}"


def generate_confirmation_number(existing: Collection[str] = ()) -> str:
    code = ""
    for _ in range(MAX_CONFIRMATION_ATTEMPTS):
        code = CONFIRMATION_PREFIX + "".join(
            random.choice(CONFIRMATION_ALPHABET) for _ in range(CONFIRMATION_LENGTH)
        )
        if code not in existing:
            return code
    # 32**6 codes; exhausting the retries means the caller passed something odd
    return code
