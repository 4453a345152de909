"""
Module de persistance SQL pour TenantDesk.

Ce module fournit l'infrastructure de stockage utilisant SQLModel (SQLAlchemy) :

- database.py : engine, registre de sessions, initialisation des tables
- models.py : modèles SQLModel représentant les tables
- repository.py : repositories génériques entité <-> modèle
- transaction.py : unité de travail partagée avec les repositories

Usage:
    from tenantdesk.infrastructure.persistence import create_db_engine, init_db

    engine = create_db_engine("sqlite:///tenantdesk.db")
    init_db(engine)
    sessions = create_session_registry(engine)
    repositories = build_sqlmodel_repositories(accessors, sessions)
"""

from tenantdesk.infrastructure.persistence.database import (
    create_db_engine,
    create_session_registry,
    get_engine,
    get_session,
    init_db,
)
from tenantdesk.infrastructure.persistence.repository import (
    SQLModelRepository,
    build_sqlmodel_repositories,
)
from tenantdesk.infrastructure.persistence.transaction import SQLModelTransactionService

__all__ = [
    "SQLModelRepository",
    "SQLModelTransactionService",
    "build_sqlmodel_repositories",
    "create_db_engine",
    "create_session_registry",
    "get_engine",
    "get_session",
    "init_db",
]
