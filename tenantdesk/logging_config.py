"""
Configuration du logging de TenantDesk via loguru.

Les modules écrivent avec `from loguru import logger` :
- DEBUG : détail du traitement de listes et des repositories
- INFO : transitions de licence, créations en lot, chargement des données de démo
- WARNING : anomalies récupérables (souscription absente, catalogue de messages illisible)

Chaque enregistrement porte le type d'activité du tenant (extra["business_type"]),
affiché en console et conservé dans le fichier JSON.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from tenantdesk.core.value_objects import DEFAULT_BUSINESS_TYPE


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = Path("logs/tenantdesk.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
    business_type: str = DEFAULT_BUSINESS_TYPE,
) -> None:
    """Configure le logging de l'application.

    Args :
        log_level : Niveau minimum pour la console (DEBUG, INFO, WARNING, ERROR)
        log_file : Fichier JSON rotatif (None : console seule, ex: tests et CLI ponctuelle)
        rotation_size : Taille maximale du fichier avant rotation (ex: "10 MB")
        retention_count : Nombre de fichiers rotatifs à conserver
        business_type : Type d'activité attaché à chaque enregistrement
    """
    logger.remove()
    logger.configure(extra={"business_type": business_type})

    logger.add(
        sys.stderr,
        level=log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<magenta>{extra[business_type]}</magenta> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_file is None:
        return

    # Le fichier garde tout le détail, y compris le DEBUG du traitement de listes
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,
    )

    logger.debug("Logging configuré", log_file=str(log_file), rotation=rotation_size)
