"""
Accesseurs de champs par type d'entité.

Le traitement de listes ne connait pas la forme des entités : chaque type
enregistre une table "nom de champ -> getter". Les champs dérivés (calculés)
s'ajoutent à la table comme n'importe quel autre champ.
"""

import dataclasses
from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, TypeVar

from tenantdesk.core.exceptions import ConfigurationError
from tenantdesk.services.listing.errors import ItemShapeMismatchError

T = TypeVar("T")


class FieldAccessor(Generic[T]):
    """
    Table de getters pour un type d'entité.

    Attributes:
        entity_type: Type attendu des éléments
        searchable_fields: Champs interrogés par défaut par la recherche
    """

    def __init__(
        self,
        entity_type: type[T],
        getters: Mapping[str, Callable[[T], Any]],
        searchable_fields: Iterable[str] = (),
    ) -> None:
        self.entity_type = entity_type
        self._getters = dict(getters)
        self.searchable_fields = tuple(searchable_fields)
        unknown = [name for name in self.searchable_fields if name not in self._getters]
        if unknown:
            raise ConfigurationError(
                f"searchable fields not declared on {entity_type.__name__}: {unknown}"
            )

    @classmethod
    def for_dataclass(
        cls,
        entity_type: type[T],
        searchable: Iterable[str] = (),
        extra: Optional[Mapping[str, Callable[[T], Any]]] = None,
    ) -> "FieldAccessor[T]":
        """
        Construit un accesseur à partir des champs déclarés d'une dataclass.

        Args:
            entity_type: Classe dataclass de l'entité
            searchable: Champs de recherche par défaut
            extra: Champs dérivés supplémentaires (nom -> getter)
        """
        getters: dict[str, Callable[[T], Any]] = {
            f.name: attrgetter(f.name) for f in dataclasses.fields(entity_type)
        }
        getters.update(extra or {})
        return cls(entity_type, getters, searchable)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self._getters)

    def has_field(self, name: str) -> bool:
        return name in self._getters

    def get(self, item: T, name: str) -> Any:
        """Valeur du champ, ou None si le champ est inconnu."""
        getter = self._getters.get(name)
        if getter is None:
            return None
        return getter(item)

    def text_fields(self, item: T) -> list[str]:
        """Champs dont la valeur courante est du texte libre (enums exclus)."""
        names = []
        for name, getter in self._getters.items():
            value = getter(item)
            if isinstance(value, str) and not isinstance(value, Enum):
                names.append(name)
        return names

    def check(self, item: Any, index: int) -> None:
        """Lève ItemShapeMismatchError si l'élément n'a pas le type attendu."""
        if not isinstance(item, self.entity_type):
            raise ItemShapeMismatchError(self.entity_type, item, index)


class AccessorRegistry:
    """Registre explicite des accesseurs, indexé par nom d'entité."""

    def __init__(self) -> None:
        self._accessors: dict[str, FieldAccessor] = {}

    def register(self, entity_name: str, accessor: FieldAccessor) -> None:
        self._accessors[entity_name] = accessor

    def get(self, entity_name: str) -> FieldAccessor:
        try:
            return self._accessors[entity_name]
        except KeyError:
            raise ConfigurationError(f"no field accessor registered for {entity_name!r}") from None

    def names(self) -> list[str]:
        return sorted(self._accessors)

    def __contains__(self, entity_name: str) -> bool:
        return entity_name in self._accessors
