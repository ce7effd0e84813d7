"""Off-the-table mode: tongue-in-cheek "what not to talk about" cards.

Pure and deterministic; no external calls.
"""

import re
from typing import List, Optional

from src.models.models import OffTableItem, OffTableRecipe

OFF_TABLE_FACT = "Fun (don't) fact: Money, politics, and exes are the fastest way to put the brakes on a great meal."

# First matching keyword wins; the match is replaced inside the original title
CHEEKY_REPLACEMENTS = [
    (re.compile(r"chicken", re.IGNORECASE), "Politely Controversial Chicken"),
    (re.compile(r"salmon", re.IGNORECASE), "Salary Negotiation Salmon"),
    (re.compile(r"taco", re.IGNORECASE), "Talk-About-Your-Ex Tacos"),
    (re.compile(r"pasta", re.IGNORECASE), "Pyramid Scheme Pasta"),
    (re.compile(r"bowl", re.IGNORECASE), "Boundary-Pushing Bowl"),
    (re.compile(r"steak", re.IGNORECASE), "Steak of Questionable Topics"),
    (re.compile(r"soup", re.IGNORECASE), "Spill-The-Tea Soup"),
]


def build_cheeky_title(title: str, cuisine: Optional[str] = None) -> str:
    base = title.strip() or "Mystery Dish"
    for pattern, value in CHEEKY_REPLACEMENTS:
        if pattern.search(base):
            return pattern.sub(value, base, count=1)

    cue = f"{cuisine} gossip" if cuisine else "family gossip"
    return f"Maybe Not Tonight {cue[0].upper()}{cue[1:]}"


def build_off_table_starters(cuisine: Optional[str] = None) -> List[str]:
    cuisine_text = cuisine.lower() if cuisine else "tonight"
    return [
        f"Kick things off with a heated debate about politics in {cuisine_text}, or maybe don't.",
        "Compare everyone's salaries before the first bite. What could go wrong?",
        "Bring up exes and elaborate family history. Definitely the vibe we're avoiding.",
    ]


def build_off_table_items(recipes: List[OffTableRecipe]) -> List[OffTableItem]:
    """Build one off-the-table card per recipe, in input order."""
    return [
        OffTableItem(
            id=recipe.id,
            off_title=build_cheeky_title(recipe.title, recipe.cuisine),
            starters=build_off_table_starters(recipe.cuisine),
            fact=OFF_TABLE_FACT,
        )
        for recipe in recipes
    ]
