"""
Persistance en mémoire (demo et tests).

- repository.py : repositories thread-safe par dictionnaire
- transaction.py : transactions par instantané des stockages
"""

from tenantdesk.infrastructure.memory.repository import (
    InMemoryRepository,
    build_memory_repositories,
)
from tenantdesk.infrastructure.memory.transaction import (
    InMemoryTransactionService,
    NoOpTransactionService,
)

__all__ = [
    "InMemoryRepository",
    "InMemoryTransactionService",
    "NoOpTransactionService",
    "build_memory_repositories",
]
