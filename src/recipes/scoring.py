"""Match scoring for search candidates.

score = matched/len(ingredients) - 0.2 * excluded hits + 0.15 diet bonus,
clamped to [0, 1]. The score is the only ranking signal; ties are broken by
prep time in the search orchestrator.
"""

from functools import cmp_to_key
from typing import Iterable, List

from src.models.models import DietFlag, Recipe, RecipeSummary

PENALTY = 0.2
BONUS = 0.15
TIE_EPSILON = 0.0001


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def score_recipe(
    recipe: Recipe,
    have: Iterable[str],
    exclude: Iterable[str],
    diets: Iterable[DietFlag],
) -> float:
    """Score a recipe against pantry items, exclusions and diet filters.

    Args:
        recipe: Candidate recipe.
        have: Pantry items; each counts once if it is a substring of any ingredient line.
        exclude: Items to avoid; each one found in an ingredient line costs 0.2.
        diets: Requested diet flags; all satisfied earns a 0.15 bonus.

    Returns:
        Score in [0, 1]. Pure and deterministic.
    """
    ingredient_lines = [line.lower() for line in recipe.ingredients]

    def _present(item: str) -> bool:
        needle = item.lower()
        return any(needle in line for line in ingredient_lines)

    matched = [item for item in have if item and _present(item)]
    disallowed = [item for item in exclude if item and _present(item)]

    diets = list(diets)
    diet_match = bool(diets) and all(flag in recipe.diet_flags for flag in diets)

    base = len(matched) / max(len(recipe.ingredients), 1)
    penalty = len(disallowed) * PENALTY
    bonus = BONUS if diet_match else 0.0

    return clamp(base - penalty + bonus, 0.0, 1.0)


def apply_match_score(recipe: Recipe, score: float) -> RecipeSummary:
    """Attach a score (rounded to 3 decimals) to the recipe's summary."""
    return recipe.to_summary(match_score=round(score, 3))


def _compare(a: RecipeSummary, b: RecipeSummary) -> int:
    delta = (b.match_score or 0.0) - (a.match_score or 0.0)
    if abs(delta) >= TIE_EPSILON:
        return -1 if delta < 0 else 1
    return a.time_minutes - b.time_minutes


def sort_summaries(summaries: Iterable[RecipeSummary]) -> List[RecipeSummary]:
    """Sort by descending score; near-equal scores fall back to ascending prep time."""
    return sorted(summaries, key=cmp_to_key(_compare))
