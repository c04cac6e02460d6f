"""Commit scope for a checkout.

Stock deduction, discount redemption and the order write happen inside one
``checkout_transaction()``: a process-wide commit lock plus a Protean
``UnitOfWork``. Everything read inside the scope is re-validated before any
write, and both the lock and the unit of work are released on every exit
path. An exception escaping the scope rolls the unit of work back, so no
partial mutation survives a failed commit.
"""

import threading
from contextlib import contextmanager

from protean import UnitOfWork

from checkout.utils.logging import get_logger

logger = get_logger(__name__)

# Serializes commits against shared Product/Discount rows. Validation and
# pricing run outside the lock; only the re-check-and-write phase is held.
_commit_lock = threading.RLock()


@contextmanager
def checkout_transaction():
    with _commit_lock:
        logger.debug("Checkout transaction started")
        with UnitOfWork():
            yield
        logger.debug("Checkout transaction committed")
