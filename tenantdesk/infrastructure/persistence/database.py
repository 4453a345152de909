"""
Configuration de la base de données pour TenantDesk.

Ce module fournit :
- Engine SQLAlchemy configure pour un accès multi-thread
- Registre de sessions (scoped_session) partage par les repositories
  et le service de transaction
- Fonction d'initialisation des tables

La base de données est configurée via TENANTDESK_DATABASE_URL (défaut: sqlite:///tenantdesk.db).
"""

from collections.abc import Generator
from pathlib import Path
from typing import Optional

from sqlalchemy import Engine
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Engine global, initialisé lors du premier appel à get_engine()
_engine: Optional[Engine] = None


def create_db_engine(database_url: str) -> Engine:
    """
    Cree un engine pour l'URL donnée.

    Pour SQLite, le répertoire parent du fichier est créé si nécessaire ;
    une base ":memory:" partage une connexion unique entre les threads.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False)

    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        db_path = Path(database_url.replace("sqlite:///", ""))
        db_path.parent.mkdir(exist_ok=True, parents=True)
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def get_engine() -> Engine:
    """
    Retourne l'engine global, en le créant si nécessaire.

    Utilise la configuration de l'application pour l'URL de la BDD.
    """
    global _engine
    if _engine is None:
        from tenantdesk.config import Settings

        _engine = create_db_engine(Settings().database_url)
    return _engine


def create_session_registry(engine: Engine) -> scoped_session:
    """
    Cree le registre de sessions (une session par thread).

    Les repositories et le service de transaction appellent le registre
    pour obtenir la session courante du thread.
    """
    factory = sessionmaker(bind=engine, class_=Session)
    return scoped_session(factory)


def get_session() -> Generator[Session, None, None]:
    """
    Générateur de session SQLModel.

    Utilisation :
        with next(get_session()) as session:
            # opérations

    Yields:
        Session SQLModel connectée à l'engine global
    """
    with Session(get_engine()) as session:
        yield session


def init_db(engine: Optional[Engine] = None) -> None:
    """
    Initialise la base de données en créant toutes les tables.

    Importe les modèles pour enregistrer leurs métadonnées dans
    SQLModel.metadata, puis crée les tables manquantes.

    Args:
        engine: Engine cible (défaut: engine global)
    """
    # L'import est fait ici pour eviter les imports circulaires
    from tenantdesk.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())
