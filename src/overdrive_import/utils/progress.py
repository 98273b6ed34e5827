"""Utilities for allocating unique console progress bar positions.

Provides a simple thread-safe counter used to assign deterministic `position`
values to `tqdm` progress bars so several imports run from one script do not
overlap in the terminal.
"""

from __future__ import annotations

import itertools
from threading import Lock

_counter = itertools.count(0)
_lock = Lock()


def get_next_position() -> int:
    """Return a next integer position for assigning to a progress bar."""
    with _lock:
        return next(_counter)

