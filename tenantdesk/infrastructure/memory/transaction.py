"""
Services de transaction sans base de données.

InMemoryTransactionService prend un instantané des stockages en mémoire
avant l'unité de travail et les restaure si elle échoue. Les unités sont
sérialisées par un verrou ; une unité imbriquée rejoint l'unité englobante.
"""

import threading
from typing import Callable, TypeVar

from loguru import logger

from tenantdesk.core.ports.repositories import Repositories
from tenantdesk.core.ports.services import ITransactionService
from tenantdesk.core.value_objects.context import RequestContext

R = TypeVar("R")


class InMemoryTransactionService(ITransactionService):
    """Transactions par instantané des repositories en mémoire."""

    def __init__(self, repositories: Repositories) -> None:
        self._repositories = repositories.all()
        self._lock = threading.RLock()
        self._depth = 0

    def supports_transactions(self) -> bool:
        return True

    def execute_in_transaction(self, ctx: RequestContext, fn: Callable[[RequestContext], R]) -> R:
        with self._lock:
            if self._depth > 0:
                return fn(ctx)
            snapshots = [(repo, repo.snapshot()) for repo in self._repositories]
            self._depth += 1
            try:
                return fn(ctx)
            except Exception:
                for repo, snapshot in snapshots:
                    repo.restore(snapshot)
                logger.debug("Transaction en mémoire annulée, stockages restaurés")
                raise
            finally:
                self._depth -= 1


class NoOpTransactionService(ITransactionService):
    """Aucune transaction : les cas d'utilisation s'exécutent directement."""

    def supports_transactions(self) -> bool:
        return False

    def execute_in_transaction(self, ctx: RequestContext, fn: Callable[[RequestContext], R]) -> R:
        return fn(ctx)
