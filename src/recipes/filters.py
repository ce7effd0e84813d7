"""Diet and exclusion filters shared by every recipe source.

Exclusion matching is substring-based over the recipe's searchable text, so
excluding "nut" also excludes "nutmeg" and "donut".
"""

from typing import Iterable

from src.models.models import DietFlag, Recipe


def normalize_diet_filters(values: Iterable[str] = ()) -> list[DietFlag]:
    """Map free-form diet strings to canonical flags.

    Matching is case-insensitive and whitespace-trimmed. Unknown values are
    dropped silently. Output follows enum order without duplicates.
    """
    wanted = {flag for flag in (DietFlag.parse(value) for value in values or ()) if flag is not None}
    return [flag for flag in DietFlag if flag in wanted]


def matches_diet(recipe: Recipe, diets: Iterable[str]) -> bool:
    """True when the recipe carries every requested flag. Empty filter always matches."""
    requested = normalize_diet_filters(diets)
    if not requested:
        return True
    return all(flag in recipe.diet_flags for flag in requested)


def matches_exclusions(recipe: Recipe, exclude: Iterable[str]) -> bool:
    """False when any exclude term appears anywhere in the recipe's searchable text."""
    terms = [term.lower() for term in exclude or () if term]
    if not terms:
        return True
    haystack = recipe.searchable_text()
    return not any(term in haystack for term in terms)


def matches_query(recipe: Recipe, query: str) -> bool:
    """True when every whitespace token of the query occurs in the searchable text."""
    tokens = query.lower().split()
    if not tokens:
        return True
    haystack = recipe.searchable_text()
    return all(token in haystack for token in tokens)


# Provider label spellings that differ from the canonical flags
_PROVIDER_SYNONYMS = {
    "gluten free": DietFlag.GLUTEN_FREE,
    "dairy free": DietFlag.DAIRY_FREE,
    "lacto ovo vegetarian": DietFlag.VEGETARIAN,
    "pescetarian": DietFlag.PESCATARIAN,
}


def map_provider_diet_labels(labels: Iterable[str]) -> list[DietFlag]:
    """Map diet/health labels from an external provider to canonical flags.

    Accepts the canonical spellings plus a few provider variants. A recipe is
    only Nut-Free when it is marked both peanut-free and tree-nut-free.
    """
    lowered = {label.strip().lower() for label in labels or () if isinstance(label, str)}
    found = set(normalize_diet_filters(lowered))
    found.update(flag for label, flag in _PROVIDER_SYNONYMS.items() if label in lowered)
    if {"peanut-free", "tree-nut-free"} <= lowered:
        found.add(DietFlag.NUT_FREE)
    return [flag for flag in DietFlag if flag in found]
