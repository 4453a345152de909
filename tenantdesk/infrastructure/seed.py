"""
Données de démonstration par type d'activité.

Les fichiers tenantdesk/seed/{business_type}.json contiennent un objet dont
chaque clé est un nom d'entité ("workspace", "license", ...) et chaque
valeur une liste d'entités au format JSON.
"""

import json
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from tenantdesk.core.exceptions import ConfigurationError, EntityNotFoundError
from tenantdesk.core.ports.repositories import Repositories
from tenantdesk.core.value_objects.context import DEFAULT_BUSINESS_TYPE
from tenantdesk.infrastructure.conversion import entity_from_dict
from tenantdesk.services.listing.accessors import AccessorRegistry

DEFAULT_SEED_DIR = Path(__file__).resolve().parent.parent / "seed"


def seed_path(business_type: str, seed_dir: Optional[Path] = None) -> Path:
    """
    Retourne le fichier de démo du type d'activité.

    Retombe sur le jeu "education" si le type n'a pas de fichier dédié.
    """
    directory = Path(seed_dir) if seed_dir else DEFAULT_SEED_DIR
    path = directory / f"{business_type}.json"
    if path.exists():
        return path
    fallback = directory / f"{DEFAULT_BUSINESS_TYPE}.json"
    if business_type != DEFAULT_BUSINESS_TYPE:
        logger.warning(
            f"Pas de données de démo pour '{business_type}', utilisation de '{DEFAULT_BUSINESS_TYPE}'"
        )
    return fallback


def load_seed_data(business_type: str, seed_dir: Optional[Path] = None) -> dict[str, list[dict[str, Any]]]:
    """
    Charge les données de démo brutes.

    Args :
        business_type : Type d'activité (ex: "education")
        seed_dir : Répertoire des fichiers (défaut: tenantdesk/seed)

    Retourne :
        Dictionnaire nom d'entité -> liste d'enregistrements ({} si aucun fichier)
    """
    path = seed_path(business_type, seed_dir)
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"invalid seed file {path}: {e}") from e
    logger.debug(f"Données de démo chargées depuis {path}")
    return {name: list(records) for name, records in data.items()}


def apply_seed(
    repositories: Repositories,
    seed: dict[str, list[dict[str, Any]]],
    accessors: AccessorRegistry,
) -> dict[str, int]:
    """
    Insere les données de démo absentes du stockage.

    Les enregistrements dont l'ID existe déjà sont ignorés, ce qui rend
    l'opération rejouable.

    Args :
        repositories : Repositories cibles
        seed : Données brutes (voir load_seed_data)
        accessors : Registre des accesseurs (type de chaque entité)

    Retourne :
        Nombre d'entités insérées par nom d'entité
    """
    inserted: dict[str, int] = {}
    for repository in repositories.all():
        name = repository.entity_name
        entity_type = accessors.get(name).entity_type
        count = 0
        for record in seed.get(name, []):
            entity = entity_from_dict(entity_type, record)
            if entity.id:
                try:
                    repository.read(entity.id)
                    continue
                except EntityNotFoundError:
                    pass
            repository.create(entity)
            count += 1
        inserted[name] = count
    logger.info(f"Données de démo insérées : {sum(inserted.values())} entités")
    return inserted
