# -*- coding: utf-8 -*-
"""UUID generation.

Identifiers are returned upper-cased. Version 7 identifiers sort by creation
time which makes them suitable as database keys.
"""

import secrets
import time
import uuid


def new_uuid():
    """Generate an upper-case version 7 UUID (unix millisecond timestamp + random bits)."""
    unix_ms = time.time_ns() // 1_000_000
    rand_a = secrets.randbits(12)
    rand_b = secrets.randbits(62)

    value = (unix_ms & 0xFFFFFFFFFFFF) << 80
    value |= 0x7 << 76
    value |= rand_a << 64
    value |= 0b10 << 62
    value |= rand_b
    return str(uuid.UUID(int=value)).upper()


def new_uuid_v8():
    """Generate an upper-case version 8 UUID made of random bits."""
    vals = bytearray(secrets.token_bytes(16))

    # bits 48-51 hold the version (8)
    vals[6] = (vals[6] & 0x0F) | 0x80

    # bits 64 and 65 hold the variant (2)
    vals[8] = (vals[8] & 0x3F) | 0x80

    return str(uuid.UUID(bytes=bytes(vals))).upper()
