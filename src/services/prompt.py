from __future__ import annotations

from typing import Optional, Sequence

from src.app.domain.models import Complexity

BASE_INSTRUCTIONS = """You are a creative and detailed chef. Based on the ingredients in the following image(s), generate a recipe.

**Formatting and Content Requirements:**
- **Title:** Start with a catchy, descriptive title (using Markdown H1: # Title).
- **Description:** Follow with a brief, enticing one-sentence description of the dish.
- **Ingredient List:** Provide a clear "Ingredients" section (using Markdown H2: ## Ingredients) with a bulleted list. Use precise measurements (e.g., 1 cup, 2 tbsp).
- **Instructions:** Provide a detailed "Instructions" section (using Markdown H2: ## Instructions) with a numbered list. Each step should be in-depth, explaining not just *what* to do, but *how* and *why*. For example, instead of "cook onions", write "sauté the diced onions in olive oil over medium heat for 5-7 minutes until they become translucent and fragrant."
- **Tone:** Your tone should be encouraging and clear.
- **Invalid Images:** If the image(s) do not contain recognizable food ingredients, respond with a friendly message explaining that you cannot create a recipe from them.

Your entire response must be in markdown."""

COMPLEXITY_INSTRUCTIONS: dict[Complexity, str] = {
    Complexity.SIMPLE: (
        "The user wants a **simple** recipe. Assume they have a very basic pantry with only "
        "salt, pepper, and cooking oil. The instructions should be extremely easy to follow "
        "for a beginner cook."
    ),
    Complexity.NORMAL: (
        "The user wants a **normal** recipe. Assume they have a standard pantry with common "
        "staples. The recipe should be something an average home cook can make."
    ),
    Complexity.EXPERT: (
        "The user wants an **expert-level** recipe. Assume they have a well-stocked pantry with "
        "a wide variety of spices, sauces, flours, etc. The recipe can be more complex, using "
        "advanced techniques and offering a gourmet result. Be very detailed in the cooking methods."
    ),
}


def complexity_clause(complexity: Optional[Complexity]) -> str:
    if complexity is None:
        return ""
    return f"**Recipe Style Instructions:**\n{COMPLEXITY_INSTRUCTIONS[complexity]}"


def dietary_clause(preferences: Sequence[str]) -> str:
    cleaned = [item.strip() for item in preferences if item and item.strip()]
    if not cleaned:
        return ""
    return (
        "**Dietary Requirements:**\n"
        f"The recipe must respect these dietary preferences: {', '.join(cleaned)}. "
        "Do not use ingredients that conflict with them, even if they appear in the image(s)."
    )


def preferences_clause(other_preferences: Optional[str]) -> str:
    cleaned = other_preferences.strip() if other_preferences else ""
    if not cleaned:
        return ""
    return f"**Additional User Preferences:**\n{cleaned}"


def build_recipe_prompt(
    complexity: Optional[Complexity] = None,
    dietary_preferences: Sequence[str] = (),
    other_preferences: Optional[str] = None,
) -> str:
    """
    Assemble the instruction text sent ahead of the images.

    Sections are always ordered base instructions, complexity, dietary
    preferences, free-text preferences. Empty sections are left out.
    """
    sections = [
        BASE_INSTRUCTIONS,
        complexity_clause(complexity),
        dietary_clause(dietary_preferences),
        preferences_clause(other_preferences),
    ]
    return "\n\n".join(section for section in sections if section)
