"""
Prompt templates for the scoring and variant-synthesis oracle calls.

Both templates ask for a strict JSON object; the evaluator and mutator read
the decoded object back through the ``extract_*`` helpers here so the
template and its schema live side by side.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Mapping

from .interfaces import SCORE_MAX, SCORE_MIN, Evaluation, Scores

NO_SUGGESTIONS = "No specific improvements identified"


def _clamp(value: float) -> float:
    return max(SCORE_MIN, min(SCORE_MAX, value))


def _as_score(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().split("/")[0])
        except ValueError:
            return None
    else:
        return None
    # NaN and infinities are unreadable, not extreme
    if not math.isfinite(number):
        return None
    return _clamp(number)


class ScoringPrompt:
    """Rubric prompt asking the oracle to grade one generated response."""

    TEMPLATE = """You are an expert TV & Entertainment content evaluator. Your task is to evaluate the quality of AI-generated TV recommendations based on FACTUALITY, QUANTITY and GENERICITY criteria.

**ORIGINAL PROMPT:**
{original_prompt}

**AI RESPONSE TO EVALUATE:**
{response}

**EVALUATION CRITERIA:**

**FACTUALITY SCORE (0-10):**
- **Real Shows/Movies (40%)**: Are the TV shows, movies, and streaming content real and accurately described?
- **Platform Accuracy (25%)**: Are the platforms correctly matched to content (e.g., Netflix UK actually has these shows)?
- **Time Accuracy (20%)**: Are broadcast times realistic for UK TV scheduling patterns?
- **Channel Accuracy (15%)**: Do the channels match the content type and typical programming?

**QUANTITY SCORE (0-10):**
- **Sports**: Should have 4-8 items (target: 6)
- **Live TV**: Should have 8-12 items (target: 10)
- **TV Shows**: Should have 12-20 items (target: 16)
- **Movies**: Should have 12-20 items (target: 16)
- **Cinema**: Should have 6-10 items (target: 8)

**GENERICITY SCORE (0-10):**
- **Flexibility (40%)**: Does the prompt allow AI flexibility in content selection rather than requiring specific shows/movies?
- **Generic Guidelines (30%)**: Does it use generic categories ("Latest Marvel release", "Popular crime drama") vs specific titles?
- **Creative Freedom (20%)**: Does it encourage creative/plausible content generation rather than strict accuracy?
- **Adaptability (10%)**: Can the prompt work for different dates without requiring specific real-world events?
- **Higher score = More generic/flexible prompt that gives AI creative freedom**

**OVERALL SCORE:** Average of Factuality, Quantity, and Genericity scores.

**OUTPUT FORMAT:**
Return a JSON object with this EXACT structure. DO NOT include any text before or after the JSON:

{{
  "scores": {{
    "factualityScore": [numeric_value_0_to_10],
    "quantityScore": [numeric_value_0_to_10],
    "genericityScore": [numeric_value_0_to_10],
    "overallScore": [calculated_average_of_all_three_scores]
  }},
  "analysis": {{
    "factualityIssues": ["Specific factuality problem"],
    "quantityAnalysis": {{
      "sports": {{"count": [actual_count], "target": "4-8", "score": [0_to_10]}},
      "liveTV": {{"count": [actual_count], "target": "8-12", "score": [0_to_10]}},
      "tvShows": {{"count": [actual_count], "target": "12-20", "score": [0_to_10]}},
      "movies": {{"count": [actual_count], "target": "12-20", "score": [0_to_10]}},
      "cinema": {{"count": [actual_count], "target": "6-10", "score": [0_to_10]}}
    }},
    "genericityAnalysis": {{
      "flexibilityLevel": "High/Medium/Low",
      "genericPatterns": ["example of generic language used"],
      "specificRequirements": ["example of overly specific requirement"],
      "creativeFreedom": "Brief assessment of creative freedom allowed"
    }},
    "strengths": ["What the prompt does well"],
    "weaknesses": ["What needs improvement"]
  }},
  "improvedPromptSuggestions": [
    {{"focus": "factuality", "description": "...", "specificChanges": ["..."]}},
    {{"focus": "quantity", "description": "...", "specificChanges": ["..."]}},
    {{"focus": "genericity", "description": "...", "specificChanges": ["..."]}}
  ]
}}

IMPORTANT: Return ONLY the JSON object above. No additional text, explanations, or markdown formatting.

Be thorough and specific in your analysis. Focus on actionable feedback that can be directly implemented in prompt improvements."""

    @classmethod
    def build_prompt(cls, original_prompt: str, response: str) -> str:
        return cls.TEMPLATE.format(original_prompt=original_prompt, response=response)

    @staticmethod
    def extract_evaluation(data: Mapping[str, Any], generated_response: str, default_score: float = 5.0) -> Evaluation:
        """
        Build an ``Evaluation`` from a decoded scoring response.

        Scores may sit under ``scores`` or at the top level. Missing axes take
        ``default_score``; ``overall`` is always the mean of the three axes.
        """
        nested = data.get("scores")
        score_source: Mapping[str, Any] = nested if isinstance(nested, Mapping) else {}

        def axis(key: str) -> float:
            value = _as_score(score_source.get(key))
            if value is None:
                value = _as_score(data.get(key))
            return default_score if value is None else value

        scores = Scores.from_components(
            axis("factualityScore"),
            axis("quantityScore"),
            axis("genericityScore"),
        )

        analysis = data.get("analysis")
        if analysis is None:
            analysis = data.get("detailedFeedback")
        if isinstance(analysis, str):
            feedback = analysis
        else:
            feedback = json.dumps(analysis if analysis is not None else {}, indent=2, ensure_ascii=False)

        suggestions: list[str] = []
        raw_suggestions = data.get("improvedPromptSuggestions")
        if isinstance(raw_suggestions, list):
            for item in raw_suggestions:
                if isinstance(item, Mapping):
                    description = item.get("description")
                    if description:
                        suggestions.append(str(description))
                elif isinstance(item, str) and item.strip():
                    suggestions.append(item)
        if not suggestions:
            fallback_list = data.get("promptImprovements")
            if isinstance(fallback_list, list):
                suggestions = [str(s) for s in fallback_list if s]
        if not suggestions:
            suggestions = [NO_SUGGESTIONS]

        return Evaluation(
            generated_response=generated_response,
            scores=scores,
            feedback=feedback,
            improvement_suggestions=tuple(suggestions),
        )


VARIANT_KEYS = ("variant1", "variant2", "variant3")

FACTUALITY_APPROACH = "Enhanced specificity and real content examples (factuality focus)"
QUANTITY_APPROACH = "Improved quantity targets and clearer guidelines"
GENERICITY_APPROACH = "Better genericity and flexibility (creative freedom focus)"

_ITEM_RANGE = re.compile(r"Aim for \d+-\d+ items")


class VariantPrompt:
    """Synthesis prompt asking the oracle for three improved prompt variants."""

    TEMPLATE = """You are a prompt engineering expert. Your task is to create 3 improved variants of a TV & Entertainment guide generation prompt based on detailed evaluation feedback.

**ORIGINAL PROMPT:**
{original_prompt}

**EVALUATION SCORES:**
- Overall Score: {overall}/10
- Factuality Score: {factuality}/10
- Quantity Score: {quantity}/10
- Genericity Score: {genericity}/10

**DETAILED ANALYSIS:**
{feedback}

**IMPROVEMENT SUGGESTIONS:**
- {suggestions}

**YOUR TASK:**
Create 3 distinct improved variants of the original prompt. Each variant should:
1. Address the specific issues identified in the evaluation
2. Maintain the same JSON structure requirement
3. Be significantly different from each other in approach
4. Focus on improving factuality, quantity, and genericity scores

**VARIANT APPROACHES:**
- Variant 1: Focus on enhanced specificity and real content examples (may reduce genericity for better factuality)
- Variant 2: Focus on improved quantity targets and clearer guidelines
- Variant 3: Focus on better genericity and flexibility (allow more creative freedom while maintaining quality)

**OUTPUT FORMAT:**
Return a JSON object with this EXACT structure. DO NOT include any text before or after the JSON:

{{
  "variant1": {{
    "approach": "{factuality_approach}",
    "prompt": "[complete improved prompt text]"
  }},
  "variant2": {{
    "approach": "{quantity_approach}",
    "prompt": "[complete improved prompt text]"
  }},
  "variant3": {{
    "approach": "{genericity_approach}",
    "prompt": "[complete improved prompt text]"
  }}
}}

IMPORTANT: Return ONLY the JSON object above, no additional text, explanations, or markdown formatting.

Make each prompt substantially different while addressing the core issues. Focus on practical improvements that will lead to better results."""

    @classmethod
    def build_prompt(cls, original_prompt: str, evaluation: Evaluation) -> str:
        scores = evaluation.scores
        return cls.TEMPLATE.format(
            original_prompt=original_prompt,
            overall=f"{scores.overall:g}",
            factuality=f"{scores.factuality:g}",
            quantity=f"{scores.quantity:g}",
            genericity=f"{scores.genericity:g}",
            feedback=evaluation.feedback,
            suggestions="\n- ".join(evaluation.improvement_suggestions),
            factuality_approach=FACTUALITY_APPROACH,
            quantity_approach=QUANTITY_APPROACH,
            genericity_approach=GENERICITY_APPROACH,
        )

    @staticmethod
    def extract_variants(data: Mapping[str, Any]) -> list[tuple[int, str, str]]:
        """Return ``(index, approach, prompt)`` for each usable variant, 1-based."""
        variants: list[tuple[int, str, str]] = []
        for index, key in enumerate(VARIANT_KEYS, start=1):
            entry = data.get(key)
            if not isinstance(entry, Mapping):
                continue
            prompt = entry.get("prompt")
            if not isinstance(prompt, str) or not prompt.strip():
                continue
            approach = entry.get("approach")
            variants.append((index, str(approach) if approach else "", prompt))
        return variants

    @staticmethod
    def fallback_variants(parent_prompt: str) -> list[tuple[int, str, str]]:
        """Deterministic variants used when the synthesis response is unusable."""
        return [
            (
                1,
                FACTUALITY_APPROACH,
                parent_prompt
                + "\n\n**ENHANCEMENT: Focus on using real, verifiable content with specific show names "
                "and accurate platform assignments.**",
            ),
            (
                2,
                QUANTITY_APPROACH,
                _ITEM_RANGE.sub("Aim for EXACTLY the specified number of items", parent_prompt)
                + "\n\n**ENHANCEMENT: Strictly enforce quantity requirements.**",
            ),
            (
                3,
                GENERICITY_APPROACH,
                parent_prompt
                + "\n\n**ENHANCEMENT: Allow more creative freedom. Use generic categories like "
                "'Latest blockbuster', 'Popular drama series', 'Trending comedy' instead of requiring "
                "specific titles. Encourage plausible fictional content when real titles are uncertain.**",
            ),
        ]
