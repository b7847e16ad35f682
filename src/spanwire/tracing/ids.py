"""Identifier generation for spans and traces.

Trace identifiers are not secrets, so a non-cryptographic random source is
used. Each call is independent; there is no shared counter.
"""

import random
import uuid

_rng = random.Random()


def generate_id() -> str:
    """Generate an RFC 4122 version 4 UUID string.

    Returns:
        Canonical 36-character UUID string (e.g. "3f2b...-4...").
    """
    return str(uuid.UUID(int=_rng.getrandbits(128), version=4))
