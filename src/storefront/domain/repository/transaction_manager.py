"""Abstract transaction boundary shared by all repositories.

Application handlers never talk to the datastore's locking or rollback
directly: they hand a unit of work to ``run()``, which executes it inside
one atomic transaction covering every repository of the same store.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import TypeVar

from storefront.domain.exceptions import TransactionAbortError

T = TypeVar("T")


class TransactionManager(ABC):

    max_attempts: int = 3
    backoff_base: float = 0.05

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Scoped transaction: commit on clean exit, abort on any exception.

        Must be re-entrant: a nested call joins the enclosing transaction.
        """

    def run(self, operation: Callable[[], T]) -> T:
        """Execute *operation* atomically, retrying datastore conflicts.

        Only TransactionAbortError is retried (with exponential backoff);
        business errors propagate on the first attempt.
        """
        for attempt in range(self.max_attempts):
            try:
                with self.transaction():
                    return operation()
            except TransactionAbortError:
                if attempt >= self.max_attempts - 1:
                    raise
                time.sleep(self.backoff_base * (2 ** attempt))
        raise TransactionAbortError("Transaction was never attempted")
