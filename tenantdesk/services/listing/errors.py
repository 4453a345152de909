"""
Erreurs du traitement de listes.

Erreurs structurées (type + valeur fautive), jamais traduites :
la traduction est la responsabilité du cas d'utilisation appelant.
"""

from typing import Any


class ListProcessingError(Exception):
    """
    Erreur de traitement d'une liste.

    Attributes:
        kind: Type d'erreur (ex: "item_shape_mismatch", "invalid_cursor")
        value: Valeur fautive
    """

    kind = "list_processing_error"

    def __init__(self, message: str, value: Any = None) -> None:
        self.value = value
        super().__init__(message)


class ItemShapeMismatchError(ListProcessingError):
    """Un élément ne correspond pas au type attendu par l'accesseur."""

    kind = "item_shape_mismatch"

    def __init__(self, expected: type, value: Any, index: int) -> None:
        self.expected = expected
        self.index = index
        super().__init__(
            f"item {index} is {type(value).__name__}, expected {expected.__name__}",
            value,
        )


class InvalidCursorError(ListProcessingError):
    """Jeton de curseur illisible ou incohérent."""

    kind = "invalid_cursor"

    def __init__(self, token: str, reason: str = "malformed") -> None:
        super().__init__(f"invalid cursor token ({reason}): {token!r}", token)
