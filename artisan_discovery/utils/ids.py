import time
import uuid


def new_id(prefix: str) -> str:
    """`<prefix>_<epoch ms>_<9 hex chars>`, e.g. search_1760781234567_3f9a0c1b2."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"
