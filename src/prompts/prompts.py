"""Prompts for the generation service.

Provides factory functions that turn validated requests into instructions for
Gemini. Topic prompts ask for a strict JSON object matching TopicsPayload;
substitution prompts ask for a single plain-text sentence.
"""

from typing import Iterable, Optional

from src.models.models import SubstitutionRequest, TopicRequest, Vibe

TOPICS_SYSTEM_INSTRUCTION = "You generate conversation starters and one fun food fact for a dinner."

SUBSTITUTION_SYSTEM_INSTRUCTION = (
    "You write one-sentence cooking instruction adjustments when an ingredient is swapped."
)

# Behavioral constraints per known vibe. Free-text themes get DEFAULT_GUIDANCE.
VIBE_GUIDANCE = {
    Vibe.FAMILY: "Warm and inclusive for every generation at the table. Favor shared memories and traditions.",
    Vibe.FRIENDS: "Playful and relaxed. Invite stories, plans and light banter.",
    Vibe.COLLEAGUES: (
        "Friendly but professional. Avoid sensitive topics: politics, religion, salaries, health, "
        "relationships and anything about performance at work."
    ),
    Vibe.DATE: "Curious and personal without being intrusive. Invite stories and preferences, never past partners.",
    Vibe.KIDS: "Use simple words and short sentences a young child understands. Make it imaginative and silly.",
}

DEFAULT_GUIDANCE = "Friendly and family-friendly. Keep the focus on food, travel and shared experiences."


def _format_list(items: Iterable[str], limit: int = 8) -> str:
    items = [item for item in items if item]
    return ", ".join(items[:limit])


def get_vibe_guidance(vibe: Optional[Vibe]) -> str:
    """Return the behavioral constraints for a vibe, or the default for free-text themes."""
    if vibe is None:
        return DEFAULT_GUIDANCE
    return VIBE_GUIDANCE[vibe]


def build_topics_prompt(request: TopicRequest, max_words: int = 28) -> str:
    """Build the user prompt for a topics request.

    Args:
        request: Validated topic request (recipe context optional).
        max_words: Word cap per sentence, stated to the model.

    Returns:
        str: Prompt text ending with the required JSON output contract.
    """
    lines = []
    recipe = request.recipe
    if recipe is not None:
        lines.append(f"Dish: {recipe.title}")
        lines.append(f"Cuisine: {recipe.cuisine}")
        lines.append(f"Main ingredients: {_format_list(recipe.ingredients) or 'varied'}")
        lines.append(f"Dietary context: {_format_list(flag.value for flag in recipe.diet_flags) or 'none'}")
    else:
        lines.append(f"Theme: {request.theme}")

    known = request.known_vibe
    lines.append(f"Vibe: {known.value if known else request.vibe}, People: {request.people}")
    if request.dietary_or_ingredient:
        lines.append(f"Dietary or ingredient focus: {request.dietary_or_ingredient}")
    lines.append(f"Tone: {get_vibe_guidance(known)}")
    if request.previous_hashes:
        lines.append(
            "These SHA-1 hashes fingerprint starters the table has already seen; "
            f"do not repeat those ideas: {', '.join(request.previous_hashes)}"
        )

    lines.append(
        "Vary your phrasing and angle every time, even for an identical request."
    )
    lines.append(
        'Output ONLY valid JSON: {"starters": [three strings], "fact": "one string"}. '
        f"Each item is one or two sentences, at most {max_words} words. "
        "Relate to the dish, cuisine or theme. Avoid controversy and precise statistics."
    )
    return "\n".join(lines)


def build_substitution_prompt(request: SubstitutionRequest) -> str:
    """Build the prompt asking how cooking changes when one ingredient is swapped."""
    recipe = request.recipe
    return (
        f"Recipe: {recipe.title} ({recipe.cuisine})\n"
        f"Original ingredient: {request.from_ingredient}\n"
        f"Replacement: {request.to_ingredient}\n"
        f"Steps: {' | '.join(recipe.steps)}\n"
        "In one concise sentence, say how cooking changes (time, order, prep). Output plain text only."
    )
