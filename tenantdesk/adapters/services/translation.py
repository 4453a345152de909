"""
Service de traduction base sur des fichiers JSON.

Les messages sont charges depuis un répertoire contenant :
- default.json : messages communs à tous les types d'activité
- {business_type}.json : surcharges propres à un type d'activité

Les fichiers sont des objets JSON imbriqués, aplatis en clés pointées
("license.errors.not_found"). Les paramètres {nom} sont substitués ;
un paramètre absent laisse le motif tel quel.
"""

import json
import threading
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from tenantdesk.core.ports.services import ITranslationService
from tenantdesk.core.value_objects.context import RequestContext

DEFAULT_MESSAGES_DIR = Path(__file__).resolve().parent.parent.parent / "i18n"
_DEFAULT_CATALOG = "default"


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def format_message(template: str, params: dict[str, Any]) -> str:
    """Substitue les paramètres nommés, en tolérant les motifs inconnus."""
    if not params:
        return template
    try:
        return template.format_map(_KeepMissing(params))
    except (ValueError, IndexError):
        # Accolades non appariées ou motif positionnel : message brut
        return template


def flatten(tree: dict[str, Any], prefix: str = "") -> dict[str, str]:
    """Aplatit un dictionnaire imbrique en clés pointées."""
    flat: dict[str, str] = {}
    for key, value in tree.items():
        dotted = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(flatten(value, dotted))
        else:
            flat[dotted] = str(value)
    return flat


class JsonTranslationService(ITranslationService):
    """
    Traduction depuis des catalogues JSON par type d'activité.

    Les catalogues sont chargés à la demande puis conservés en mémoire.
    """

    def __init__(self, messages_dir: Optional[Path] = None) -> None:
        self._messages_dir = Path(messages_dir) if messages_dir else DEFAULT_MESSAGES_DIR
        self._catalogs: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    def _catalog(self, name: str) -> dict[str, str]:
        with self._lock:
            if name not in self._catalogs:
                self._catalogs[name] = self._load(name)
            return self._catalogs[name]

    def _load(self, name: str) -> dict[str, str]:
        path = self._messages_dir / f"{name}.json"
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Catalogue de messages illisible {path}: {e}")
            return {}
        logger.debug(f"Catalogue de messages charge : {path}")
        return flatten(data)

    def lookup(self, business_type: str, key: str) -> Optional[str]:
        """Cherche la clé dans le catalogue du type d'activité, puis dans le catalogue commun."""
        if business_type:
            message = self._catalog(business_type).get(key)
            if message is not None:
                return message
        return self._catalog(_DEFAULT_CATALOG).get(key)

    def get(self, ctx: RequestContext, business_type: str, key: str, **params: Any) -> str:
        message = self.lookup(business_type, key)
        return format_message(message if message is not None else key, params)

    def get_with_default(
        self,
        ctx: RequestContext,
        business_type: str,
        key: str,
        default: str,
        **params: Any,
    ) -> str:
        message = self.lookup(business_type, key)
        return format_message(message if message is not None else default, params)


class NoOpTranslationService(ITranslationService):
    """Retourne toujours le message par défaut (ou la clé)."""

    def get(self, ctx: RequestContext, business_type: str, key: str, **params: Any) -> str:
        return format_message(key, params)

    def get_with_default(
        self,
        ctx: RequestContext,
        business_type: str,
        key: str,
        default: str,
        **params: Any,
    ) -> str:
        return format_message(default or key, params)
