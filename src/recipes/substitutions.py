"""Ingredient substitutions: bundled swap options and generated cooking deltas."""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from src.models.models import SubstitutionOption, SubstitutionRequest
from src.prompts.prompts import SUBSTITUTION_SYSTEM_INSTRUCTION, build_substitution_prompt
from src.recipes.filters import normalize_diet_filters
from src.recipes.sources import DATA_DIR
from src.topics.generator import GeminiClient, RetryPolicy
from src.topics.parsing import sanitize_sentence
from src.utils.errors import UpstreamTransientError
from src.utils.logger import logger

SUBSTITUTIONS_PATH = DATA_DIR / "substitutions.json"
MAX_OPTIONS = 3
DELTA_MAX_WORDS = 40

RATIO_HINTS = {
    "milk + lemon juice": "Use 1 cup milk + 1 tbsp lemon.",
    "oat milk + lemon juice": "Use the same volume plus 1 tsp lemon.",
    "tamari": "Swap 1:1 for soy sauce.",
    "coconut aminos": "Use 1.5x for the same saltiness.",
    "nutritional yeast": "Start with 2 tbsp for cheesy notes.",
    "vegan butter": "Use equal amount as butter.",
    "olive oil": "Use slightly less than butter for sautés.",
}

SubstitutionDataset = Dict[str, Dict[str, List[str]]]


def load_substitutions(path: Path = SUBSTITUTIONS_PATH) -> SubstitutionDataset:
    """Load the swap dataset: {diet or "general": {ingredient: [options]}}.

    Raises:
        RuntimeError: If the file cannot be read or parsed.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise RuntimeError(f"Substitution dataset could not be loaded from {path}: {e}") from e
    return {section.lower(): {k.lower(): list(v) for k, v in entries.items()} for section, entries in data.items()}


def fallback_delta(from_ingredient: str, to_ingredient: str) -> str:
    return f"Swap {from_ingredient} for {to_ingredient} and adjust seasoning to taste."


class SubstitutionService:
    """Swap suggestions from the bundled dataset and one-sentence cooking deltas."""

    def __init__(
        self,
        client: Optional[GeminiClient],
        policy: RetryPolicy,
        dataset: Optional[SubstitutionDataset] = None,
    ) -> None:
        self.client = client
        self.policy = policy
        self.dataset = dataset if dataset is not None else load_substitutions()

    def get_options(self, ingredient: str, diets: Iterable[str] = ()) -> List[SubstitutionOption]:
        """Up to three swaps: options for the requested diets first, then general ones.

        Unknown diets and ingredients contribute nothing; duplicates keep their
        first position.
        """
        normalized = ingredient.strip().lower()
        collected: List[str] = []
        sections = [flag.value.lower() for flag in normalize_diet_filters(diets)] + ["general"]
        for section in sections:
            for option in self.dataset.get(section, {}).get(normalized, []):
                if option not in collected:
                    collected.append(option)

        return [SubstitutionOption(option=option, hint=RATIO_HINTS.get(option)) for option in collected[:MAX_OPTIONS]]

    async def explain(self, request: SubstitutionRequest, identifier: Optional[str] = None) -> str:
        """One sentence on how cooking changes with the swap. Never fails."""
        fallback = fallback_delta(request.from_ingredient, request.to_ingredient)
        if self.client is None:
            return fallback

        prompt = build_substitution_prompt(request)
        client = self.client

        async def _attempt(model: str) -> str:
            text = await client.generate(model, prompt, SUBSTITUTION_SYSTEM_INSTRUCTION)
            delta = sanitize_sentence(text, DELTA_MAX_WORDS)
            if not delta:
                raise UpstreamTransientError("Empty substitution delta", source=model)
            return delta

        delta = await self.policy.execute(_attempt, "Substitution delta", identifier, prompt)
        if delta is None:
            logger.info("Serving templated substitution delta", extra={"identifier": identifier})
            return fallback
        return delta
