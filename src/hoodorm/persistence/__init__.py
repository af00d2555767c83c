"""
Persistence layer components: the session facade and transaction levels.
"""

from .session import Session
from .transaction import TransactionError, TransactionManager

__all__ = ["Session", "TransactionError", "TransactionManager"]
