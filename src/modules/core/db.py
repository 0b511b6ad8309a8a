"""Per-call transaction scoping for repositories.

Each repository primitive runs inside its own ``unit_of_work``: the block
is wrapped in ``transaction.atomic`` so it commits on success and rolls
back on any exception.  Database failures are translated into
``PersistenceError`` after the rollback; domain errors raised inside the
block roll back too and propagate unchanged.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from django.db import DatabaseError, transaction

from modules.core.exceptions import PersistenceError

logger = structlog.get_logger(__name__)


@contextmanager
def unit_of_work(operation: str, **context: Any) -> Iterator[None]:
    """Run the enclosed block as one atomic unit of work.

    ``operation`` names the primitive in logs and error messages, e.g.
    ``"product.save"``.  Extra keyword arguments are bound to the error log.
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        logger.error(
            "unit_of_work.rolled_back",
            operation=operation,
            error=str(exc),
            **context,
        )
        raise PersistenceError(f"{operation} failed: {exc}") from exc
