import time

# last id handed out; ids are epoch milliseconds, bumped by one on collision
_LAST_ID = 0

def now_ms() -> int:
    return int(time.time() * 1000)

def new_id() -> str:
    """Time-based id, strictly increasing within the process."""
    global _LAST_ID
    now = now_ms()
    _LAST_ID = now if now > _LAST_ID else _LAST_ID + 1
    return str(_LAST_ID)
