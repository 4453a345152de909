"""
Recherche plein texte avec score de pertinence.

Barème par champ (comparaison insensible à la casse) :
- valeur identique à la requête : 1.0
- valeur commençant par la requête : 0.7
- requête contenue dans la valeur : 0.4
- requête multi-mots sans correspondance globale : 0.4 x (mots trouvés / mots)
- correspondance approximative (option fuzzy, ratio >= 0.6) : 0.2 x ratio

Le score d'un élément est la somme pondérée des scores de ses champs.
Les éléments à score nul sont écartés, les autres sont classés par score
décroissant (tri stable : à score égal, l'ordre d'origine est conservé).
"""

from typing import Any, Optional

from rapidfuzz import fuzz, utils

from tenantdesk.core.value_objects.listing import (
    HighlightSpan,
    SearchMetrics,
    SearchRequest,
    SearchResult,
)
from tenantdesk.services.listing.accessors import FieldAccessor
from tenantdesk.services.listing.filters import as_text

EXACT_SCORE = 1.0
PREFIX_SCORE = 0.7
SUBSTRING_SCORE = 0.4
FUZZY_WEIGHT = 0.2
FUZZY_THRESHOLD = 0.6

# Nombre de caractères de contexte autour d'une correspondance surlignée
HIGHLIGHT_CONTEXT = 50

_PUNCTUATION = ".,!?;:"

STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "any", "can",
    "had", "her", "was", "one", "our", "out", "has", "have", "this", "that",
    "with", "from", "they", "will", "what", "when", "where", "which", "who",
})

Span = tuple[int, int]


def tokenize(query: str) -> list[str]:
    """Découpe la requête en mots minuscules, ponctuation de bord retirée."""
    terms = []
    for raw in query.lower().split():
        term = raw.strip(_PUNCTUATION)
        if term:
            terms.append(term)
    return terms


def score_text(text: str, query: str, terms: list[str], fuzzy: bool = False) -> tuple[float, Optional[Span]]:
    """
    Calcule le score d'une valeur de champ.

    Returns:
        (score, span) ou span est la position de la correspondance dans `text`,
        None si aucune position n'est surlignable.
    """
    lowered = text.lower()
    needle = query.strip().lower()
    if not lowered or not needle:
        return 0.0, None

    if lowered == needle:
        return EXACT_SCORE, (0, len(text))
    if lowered.startswith(needle):
        return PREFIX_SCORE, (0, len(needle))
    position = lowered.find(needle)
    if position >= 0:
        return SUBSTRING_SCORE, (position, position + len(needle))

    if len(terms) > 1:
        hits = [(lowered.find(term), term) for term in terms if term in lowered]
        if hits:
            first_pos, first_term = min(hits)
            score = SUBSTRING_SCORE * len(hits) / len(terms)
            return score, (first_pos, first_pos + len(first_term))

    if fuzzy:
        ratio = fuzz.partial_ratio(needle, text, processor=utils.default_process) / 100
        if ratio >= FUZZY_THRESHOLD:
            return FUZZY_WEIGHT * ratio, None

    return 0.0, None


def highlight(field: str, text: str, span: Span) -> HighlightSpan:
    """Construit l'extrait surligne avec son contexte."""
    start, end = span
    left = max(0, start - HIGHLIGHT_CONTEXT)
    right = min(len(text), end + HIGHLIGHT_CONTEXT)
    fragment = (
        ("..." if left > 0 else "")
        + text[left:start]
        + "<mark>" + text[start:end] + "</mark>"
        + text[end:right]
        + ("..." if right < len(text) else "")
    )
    return HighlightSpan(field=field, start=start, end=end, fragment=fragment)


def top_terms(terms: list[str]) -> tuple[str, ...]:
    """Mots significatifs de la requête, uniques, dans l'ordre de saisie."""
    seen: dict[str, None] = {}
    for term in terms:
        if len(term) > 2 and term not in STOP_WORDS:
            seen.setdefault(term, None)
    return tuple(seen)


def apply_search(
    items: list,
    request: SearchRequest,
    accessor: FieldAccessor,
) -> tuple[list, list[SearchResult], SearchMetrics]:
    """
    Filtre et classe les éléments par pertinence.

    Args:
        items: Eléments déjà filtres
        request: Requête de recherche (requête non vide)
        accessor: Accesseur de champs du type des éléments

    Returns:
        (éléments retenus, résultats de recherche parallèles, métriques)
    """
    query = request.query.strip()
    terms = tokenize(query)
    field_match_counts: dict[str, int] = {}
    scored: list[tuple[Any, SearchResult]] = []

    for item in items:
        fields = request.fields or accessor.searchable_fields or accessor.text_fields(item)
        total = 0.0
        spans = []
        for name in fields:
            if not accessor.has_field(name):
                continue
            value = accessor.get(item, name)
            if value is None:
                continue
            text = as_text(value)
            score, span = score_text(text, query, terms, request.fuzzy)
            weighted = score * request.field_weights.get(name, 1.0)
            if weighted <= 0:
                continue
            total += weighted
            field_match_counts[name] = field_match_counts.get(name, 0) + 1
            if request.highlight and span is not None:
                spans.append(highlight(name, text, span))
        if total > 0:
            scored.append((item, SearchResult(score=total, highlights=tuple(spans))))

    scored.sort(key=lambda pair: pair[1].score, reverse=True)
    if request.max_results > 0:
        scored = scored[: request.max_results]

    metrics = SearchMetrics(
        total_results=len(scored),
        top_terms=top_terms(terms),
        field_match_counts=field_match_counts,
    )
    return [item for item, _ in scored], [result for _, result in scored], metrics
