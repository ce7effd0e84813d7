"""Deterministic local fallback for conversation topics.

Used whenever the generation service is unavailable, misconfigured or keeps
returning unusable output. Templates are keyed by recipe, known vibe or free
theme and interpolated with the request's dish, cuisine and theme names.
Selection uses an injected random.Random so tests can seed it. Never raises.
"""

import random
from typing import Dict, List, Optional

from src.models.models import TopicRequest, TopicsResponse, Vibe
from src.topics.parsing import sanitize_sentence
from src.utils.cache import hash_string

RECIPE_STARTERS = [
    "Ask which memory this {cuisine} classic stirs up while everyone samples the {title}.",
    "Invite the table to guess which ingredient ({ingredients}) makes {title} shine.",
    "If we hosted a {vibe} dinner around {title} every year, what new ritual would we add next time?",
    "Who at the table would win a {cuisine} cook-off, and what would they make after {title}?",
    "If {title} had a soundtrack, which song should play while we eat it?",
]

RECIPE_FACTS = [
    "{cuisine} cooks often say balance is everything, and {title} delivers it in every bite.",
    "Many {cuisine} dishes began as resourceful home cooking, which is why {title} feels made for sharing.",
]

THEME_STARTERS = [
    "What keeps you coming back to {theme} flavors: nostalgia, spice, or something else?",
    "If we built a whole dinner around {theme}, what story or memory should lead the conversation?",
    "What playful ritual would you add to a {theme} night to make it unforgettable?",
    "Which {theme} dish would you teach someone to cook first, and why?",
]

THEME_FACTS = [
    "{theme} comfort dishes often began as resourceful home cooking, perfect fuel for genuine table talk.",
    "{theme} cuisine is famous for gathering people; every course is an invitation to share stories.",
    "Hosting a {theme} dinner is really about connection: flavors, pacing and tradition all spark conversation.",
]

VIBE_STARTERS: Dict[Vibe, List[str]] = {
    Vibe.FAMILY: [
        "What's a small win someone had this week that we can celebrate together?",
        "Which family tradition should we keep alive, or start fresh, this season?",
        "If we planned a surprise day out together, what would we all want to include?",
        "Which family recipe deserves to be passed down, and who should learn it first?",
    ],
    Vibe.FRIENDS: [
        "What's a tiny luxury you treated yourself to recently, or want to soon?",
        "Which adventure or day trip should we plan before the season ends?",
        "What song instantly takes you back to a memorable night with friends?",
        "What's the best meal you've ever had on a trip, and who were you with?",
    ],
    Vibe.COLLEAGUES: [
        "What's one non-work skill you picked up lately that surprised you?",
        "Which local spot should we recommend to the next out-of-town teammate?",
        "If we could swap roles for a day just for fun, whose job would you try?",
        "What's a book, show or podcast you'd recommend to the table?",
    ],
    Vibe.DATE: [
        "What's a simple joy you've discovered lately that makes the everyday feel special?",
        "If we could teleport to any cafe or dinner spot in the world, where would we choose?",
        "What's a story from your week that made you smile more than you expected?",
        "What's a dish you'd love to learn to cook together?",
    ],
    Vibe.KIDS: [
        "If tonight's meal could magically talk, what story would it tell us?",
        "What's something awesome you'd add to a dream playground?",
        "If you could invent a new ice cream flavor, what would you call it?",
        "If you were a vegetable, which one would you be and why?",
    ],
}

VIBE_FACTS: Dict[Vibe, List[str]] = {
    Vibe.FAMILY: [
        "Tomatoes are technically a fruit, which is why they pair so naturally with both savory and sweet dishes.",
    ],
    Vibe.FRIENDS: [
        "Sharing a meal releases oxytocin, the same hormone tied to feelings of trust and bonding.",
    ],
    Vibe.COLLEAGUES: [
        "In Japan, slurping noodles is seen as a compliment to the chef and signals you're enjoying the meal.",
    ],
    Vibe.DATE: [
        "The tradition of clinking glasses became a cheerful toast to shared trust.",
    ],
    Vibe.KIDS: [
        "Honey never spoils; archaeologists have found jars in ancient tombs that are still perfectly sweet.",
    ],
}

GENERIC_STARTERS = THEME_STARTERS[:3]
GENERIC_FACT = "Sharing a meal is one of the oldest ways people have built friendships."


class _Values(dict):
    """Template values; unknown placeholders are left as-is rather than raising."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def _template_values(request: TopicRequest) -> _Values:
    recipe = request.recipe
    if recipe is not None:
        ingredients = ", ".join(recipe.ingredients[:3]) or recipe.title
        return _Values(
            title=recipe.title,
            cuisine=recipe.cuisine,
            ingredients=ingredients,
            vibe=request.vibe.lower(),
            theme=recipe.title,
        )
    return _Values(title=request.theme, cuisine=request.theme, ingredients="", vibe=request.vibe.lower(), theme=request.theme)


def _pools(request: TopicRequest) -> tuple[List[str], List[str]]:
    if request.recipe is not None:
        return RECIPE_STARTERS, RECIPE_FACTS
    vibe = request.known_vibe
    if vibe is not None:
        return VIBE_STARTERS[vibe], VIBE_FACTS[vibe]
    return THEME_STARTERS, THEME_FACTS


def build_fallback_topics(
    request: TopicRequest,
    rng: Optional[random.Random] = None,
    max_words: int = 28,
) -> TopicsResponse:
    """Synthesize 3 starters and a fact from the local template tables.

    Args:
        request: Validated topic request.
        rng: Random source for template selection; a fresh unseeded one by default.
        max_words: Word cap applied to every sentence.

    Returns:
        TopicsResponse with source="fallback" and hashes for every sentence.
    """
    rng = rng or random.Random()
    try:
        starter_pool, fact_pool = _pools(request)
        values = _template_values(request)
        starters = [template.format_map(values) for template in rng.sample(starter_pool, 3)]
        fact = rng.choice(fact_pool).format_map(values)
    except Exception:
        starters, fact = list(GENERIC_STARTERS), GENERIC_FACT
        starters = [template.replace("{theme}", "tonight's") for template in starters]

    starters = [sanitize_sentence(starter, max_words) for starter in starters]
    fact = sanitize_sentence(fact, max_words)
    return TopicsResponse(
        starters=starters,
        fact=fact,
        hashes=[hash_string(text) for text in [*starters, fact]],
        source="fallback",
    )
