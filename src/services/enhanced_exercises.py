"""Enhanced exercise generation.

Scores words by how "conceptual" they look instead of picking at random.
It only simulates the latency of a remote model and never performs I/O.
Whenever it cannot build an exercise the base generator fills in.
"""

import asyncio
import logging
import random
import uuid

from src.config import get_settings
from src.schemas.exercise import Exercise
from src.schemas.insight import ExerciseType, Insight
from src.services import exercises as base
from src.services.errors import ExerciseGenerationError
from src.services.vocabulary import (
    BLANK,
    COMMON_WORDS,
    CONCEPT_COMMON_WORDS,
    CONCEPTUAL_SUFFIXES,
    CONTEXT_WORDS,
    EXTENDED_PUNCTUATION,
    KEYWORD_EXPLANATIONS,
    SMART_DISTRACTORS,
    TECHNICAL_SUFFIXES,
    strip_punctuation,
)

logger = logging.getLogger(__name__)

IMPORTANCE_THRESHOLD = 0.5
MAX_CONCEPTS = 3
PROMPT_EXCERPT_LENGTH = 100


def calculate_word_importance(word: str, content: str) -> float:
    """Importance in [0, 1] of ``word`` within ``content``."""
    clean = strip_punctuation(word, EXTENDED_PUNCTUATION).lower()
    if clean in COMMON_WORDS:
        return 0.0

    importance = 0.5
    if len(clean) > 6:
        importance += 0.2
    if len(clean) > 8:
        importance += 0.1
    if clean.endswith(TECHNICAL_SUFFIXES):
        importance += 0.3

    # Boost words introduced by "conceito", "método", ... (first occurrence only)
    nearby = content.lower().split()
    if clean in nearby:
        position = nearby.index(clean)
        if position > 0 and nearby[position - 1] in CONTEXT_WORDS:
            importance += 0.4

    return min(importance, 1.0)


def extract_concepts(content: str) -> list[str]:
    """Up to three distinct concept-like words, in order of appearance."""
    words = [strip_punctuation(w, EXTENDED_PUNCTUATION) for w in content.split()]

    concepts: list[str] = []
    for word in words:
        if len(word) <= 4 or word in concepts:
            continue
        lower = word.lower()
        if lower in CONCEPT_COMMON_WORDS:
            continue
        if lower.endswith(CONCEPTUAL_SUFFIXES) or word[0].isupper() or len(word) > 6:
            concepts.append(word)
    return concepts[:MAX_CONCEPTS]


class EnhancedExerciseGenerator:
    """Generator ranking words by importance, with a simulated model delay."""

    def __init__(self, rng: random.Random | None = None, latency: float | None = None) -> None:
        self.rng = rng or random.Random()
        self.latency = get_settings().exercise_latency_seconds if latency is None else latency

    async def _simulate_latency(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    def _explain_keyword(self, word: str, insight: Insight) -> str:
        explanation = self.rng.choice(KEYWORD_EXPLANATIONS).format(word=word)
        if insight.note:
            return f"{explanation} Nota adicional: {insight.note}"
        return explanation

    async def fill_blank(self, insight: Insight) -> Exercise | None:
        """Blank out the most important word, or ``None`` when none stands out."""
        await self._simulate_latency()

        tokens = insight.content.split()
        scored = []
        for index, token in enumerate(tokens):
            word = strip_punctuation(token, EXTENDED_PUNCTUATION)
            importance = calculate_word_importance(token, insight.content)
            if len(word) > 3 and importance > IMPORTANCE_THRESHOLD:
                scored.append((importance, index, word))
        if not scored:
            return None

        # Stable: the earliest word wins ties
        _, index, word = sorted(scored, key=lambda item: item[0], reverse=True)[0]
        tokens[index] = BLANK

        return Exercise(
            id=str(uuid.uuid4()),
            insight_id=insight.id,
            type=ExerciseType.FILL_BLANK,
            prompt=" ".join(tokens),
            correct_answer=word.lower(),
            explanation=self._explain_keyword(word, insight),
        )

    async def multiple_choice(self, insight: Insight) -> Exercise:
        """Ask for the main concept; raises when no concept can be found."""
        await self._simulate_latency()

        concepts = extract_concepts(insight.content)
        if not concepts:
            raise ExerciseGenerationError(f"No concepts found in insight {insight.id}")

        main_concept = concepts[0]
        pool = [w for w in SMART_DISTRACTORS if w.lower() != main_concept.lower()]
        options = [main_concept, *self.rng.sample(pool, base.DISTRACTOR_COUNT)]
        self.rng.shuffle(options)

        excerpt = insight.content[:PROMPT_EXCERPT_LENGTH]
        return Exercise(
            id=str(uuid.uuid4()),
            insight_id=insight.id,
            type=ExerciseType.MULTIPLE_CHOICE,
            prompt=f'Baseado no insight "{excerpt}...", qual é o conceito central?',
            options=options,
            correct_answer=main_concept.lower(),
            explanation=(
                f'O conceito central é "{main_concept}". Este conceito representa a ideia '
                "principal do insight e é fundamental para compreender a mensagem transmitida."
            ),
        )

    async def generate(self, insight: Insight) -> list[Exercise]:
        exercises = []

        fill_blank = await self.fill_blank(insight)
        if fill_blank is None:
            logger.debug(f"No important word in insight {insight.id}, using base fill-blank")
            fill_blank = base.generate_fill_blank(insight, self.rng)
        if fill_blank:
            exercises.append(fill_blank)

        try:
            exercises.append(await self.multiple_choice(insight))
        except ExerciseGenerationError as e:
            logger.warning(f"Enhanced multiple choice failed, using base generator: {e}")
            multiple_choice = base.generate_multiple_choice(insight, self.rng)
            if multiple_choice:
                exercises.append(multiple_choice)

        exercises.append(base.generate_open_answer(insight, self.rng))
        return exercises


def get_exercise_generator(
    use_ai: bool = False, rng: random.Random | None = None
) -> base.ExerciseGenerator:
    """Select the generation strategy for a user's settings."""
    if use_ai:
        return EnhancedExerciseGenerator(rng=rng)
    return base.BaseExerciseGenerator(rng=rng)
