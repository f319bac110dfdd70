"""Identifier generation for filters, groups and projects."""

import random
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits


def generate_id(kind: str) -> str:
    """Return a unique id of the form ``<kind>-<millis>-<random>``."""
    suffix = "".join(random.choices(_ALPHABET, k=9))
    return f"{kind}-{int(time.time() * 1000)}-{suffix}"
