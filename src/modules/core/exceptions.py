"""Domain error taxonomy shared by every module.

Services raise one of three kinds of failure:

- ``BusinessRuleViolation``: malformed or out-of-range input, or a broken
  business rule.  Never retried, never partially applied.
- ``EntityNotFound``: the referenced id does not exist.
- ``PersistenceError``: the underlying store failed inside a transaction.
  The transaction has already been rolled back when this is raised.

The interface layer (views, JSON façade, management commands) catches these
and decides how to present them.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for every error raised by the service layer."""


class BusinessRuleViolation(DomainError):
    """Input rejected by validation or by a business rule."""


class EntityNotFound(DomainError):
    """The referenced entity does not exist."""


class PersistenceError(DomainError):
    """A store-level failure, raised after the transaction was rolled back."""
