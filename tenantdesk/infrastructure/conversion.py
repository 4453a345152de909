"""
Conversion entre entités de domaine (dataclass) et dictionnaires.

Les lignes de table SQLModel et les données de démo (JSON) passent par
entity_from_dict ; les corps de requête HTTP, non fiables, sont validés par
pydantic via entity_from_payload. Les enums sont stockés par leur valeur ;
les dates sans fuseau sont considérées en UTC.
"""

import dataclasses
import types
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from typing import Any, Union, get_args, get_origin, get_type_hints

from pydantic import TypeAdapter


@lru_cache(maxsize=None)
def _field_types(cls: type) -> dict[str, type]:
    """Retourne le type concret de chaque champ (Optional déroulé)."""
    hints = get_type_hints(cls)
    resolved = {}
    for f in dataclasses.fields(cls):
        hint = hints[f.name]
        if get_origin(hint) in (Union, types.UnionType):
            args = [arg for arg in get_args(hint) if arg is not type(None)]
            hint = args[0] if len(args) == 1 else Any
        resolved[f.name] = hint
    return resolved


def _coerce(value: Any, target: Any) -> Any:
    if value is None:
        return None
    if isinstance(target, type):
        if issubclass(target, Enum) and not isinstance(value, target):
            return target(value)
        if target is datetime:
            if isinstance(value, str):
                value = datetime.fromisoformat(value.replace("Z", "+00:00"))
            if isinstance(value, datetime) and value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return value
        if target is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
    return value


def entity_to_dict(entity: Any) -> dict[str, Any]:
    """
    Convertit une entité en dictionnaire plat.

    Args :
        entity : Instance dataclass

    Retourne :
        Dictionnaire champ -> valeur (enums remplacés par leur valeur)
    """
    row = {}
    for f in dataclasses.fields(entity):
        value = getattr(entity, f.name)
        row[f.name] = value.value if isinstance(value, Enum) else value
    return row


def entity_from_dict(cls: type, data: dict[str, Any]) -> Any:
    """
    Construit une entité à partir d'un dictionnaire.

    Les clés inconnues sont ignorées, les champs absents gardent leur
    valeur par défaut.

    Args :
        cls : Classe dataclass de l'entité
        data : Valeurs brutes (JSON ou ligne de table)

    Retourne :
        L'entité construite
    """
    field_types = _field_types(cls)
    values = {
        name: _coerce(data[name], target)
        for name, target in field_types.items()
        if name in data
    }
    return cls(**values)


@lru_cache(maxsize=None)
def _payload_adapter(cls: type) -> TypeAdapter:
    return TypeAdapter(cls)


def entity_from_payload(cls: type, data: dict[str, Any]) -> Any:
    """
    Construit une entité à partir d'un corps de requête.

    Les types des champs sont contrôlés par pydantic (mode souple : "10"
    devient 10.0, "abc" est refusé). Les clés inconnues sont ignorées.

    Args :
        cls : Classe dataclass de l'entité
        data : Corps JSON décodé

    Retourne :
        L'entité construite

    Raises :
        pydantic.ValidationError : Si une valeur ne correspond pas au type du champ
    """
    entity = _payload_adapter(cls).validate_python(data)
    for f in dataclasses.fields(entity):
        value = getattr(entity, f.name)
        if isinstance(value, datetime) and value.tzinfo is None:
            setattr(entity, f.name, value.replace(tzinfo=timezone.utc))
    return entity


def to_display(value: Any) -> str:
    """Représentation texte d'une valeur de champ (CLI)."""
    if value is None:
        return "-"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, bool):
        return "oui" if value else "non"
    return str(value)
