"""
Identifier generators for stored visits.

``generate_visit_id`` prefers a random UUID. When the OS randomness source is
unavailable it degrades to a PRNG string suffixed with the timestamp, which is
unique in practice but not cryptographically guaranteed.
"""

from __future__ import annotations

import random
import string
import uuid


def generate_random_code(length: int = 11) -> str:
    """Generate a lowercase alphanumeric string from the system PRNG.

    Args:
        length: Number of characters (default 11).
    """
    letters = string.ascii_lowercase + string.digits
    return "".join(random.choice(letters) for _ in range(length))


def generate_visit_id(now_ms: int) -> str:
    """Return a collision-resistant identifier for a visit key.

    Args:
        now_ms: Server epoch milliseconds, used by the fallback path.
    """
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        # os.urandom has no entropy source on this platform
        return f"{generate_random_code()}{now_ms}"
