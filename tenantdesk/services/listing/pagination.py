"""
Calcul de pagination (par page ou par curseur).

Les paramètres incohérents sont corrigés (limite bornée, page >= 1) ;
seul un jeton de curseur illisible lève une erreur.

Le curseur est un jeton opaque : JSON {"offset": n} encode en base64 URL-safe.
"""

import base64
import binascii
import json
import math
from typing import Optional

from tenantdesk.core.value_objects.listing import PaginationRequest, PaginationResponse
from tenantdesk.services.listing.errors import InvalidCursorError

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def resolve_limit(requested: Optional[int], default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT) -> int:
    """
    Borne la taille de page demandée.

    Une limite absente ou <= 0 donne la limite par défaut ;
    sinon min(max(limite, 1), max_limit).
    """
    if requested is None or requested <= 0:
        return min(default_limit, max_limit)
    return min(max(requested, 1), max_limit)


def encode_cursor(offset: int) -> str:
    raw = json.dumps({"offset": offset}, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(token: str) -> int:
    """Retourne l'offset code dans le jeton (InvalidCursorError si illisible)."""
    if not token:
        raise InvalidCursorError(token, "empty")
    padded = token + "=" * (-len(token) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, ValueError, UnicodeError):
        raise InvalidCursorError(token) from None
    if not isinstance(payload, dict):
        raise InvalidCursorError(token)
    offset = payload.get("offset")
    if not isinstance(offset, int) or isinstance(offset, bool):
        raise InvalidCursorError(token)
    if offset < 0:
        raise InvalidCursorError(token, "negative offset")
    return offset


def paginate(
    items: list,
    request: Optional[PaginationRequest],
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> tuple[list, PaginationResponse]:
    """
    Découpe la liste selon la requête de pagination.

    Args:
        items: Eléments filtres, recherches et tries
        request: Requête de pagination (None = première page, limite par défaut)
        default_limit: Limite appliquée si aucune n'est demandée
        max_limit: Limite maximale autorisée

    Returns:
        (éléments de la page, réponse de pagination)
    """
    request = request or PaginationRequest()
    limit = resolve_limit(request.limit, default_limit, max_limit)
    total = len(items)

    if request.uses_cursor:
        offset = decode_cursor(request.cursor)
        page = offset // limit + 1
    else:
        page = max(request.page or 1, 1)
        offset = (page - 1) * limit

    has_next = offset + limit < total
    # Une liste vide n'a ni page suivante ni page précédente
    has_previous = offset > 0 and total > 0
    response = PaginationResponse(
        total_items=total,
        current_page=page,
        total_pages=math.ceil(total / limit),
        has_next=has_next,
        has_previous=has_previous,
        limit=limit,
        next_cursor=encode_cursor(offset + limit) if has_next else None,
        previous_cursor=encode_cursor(max(offset - limit, 0)) if has_previous else None,
    )
    return items[offset : offset + limit], response
