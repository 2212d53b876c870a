"""Exercise generation from an insight's text.

Three exercise types are derived from the content alone: fill-in-the-blank,
multiple choice and open answer. A generator returns ``None`` when the text
has no usable words; that is a normal outcome, not an error.
"""

import random
import uuid
from typing import Protocol

from src.schemas.exercise import Exercise
from src.schemas.insight import ExerciseType, Insight
from src.services.vocabulary import (
    BLANK,
    DISTRACTORS,
    FILLER_DISTRACTORS,
    OPEN_ANSWER_PROMPTS,
    is_stop_word,
    strip_punctuation,
)

DISTRACTOR_COUNT = 3
PROMPT_EXCERPT_LENGTH = 80


class ExerciseGenerator(Protocol):
    """Strategy turning one insight into a list of exercises."""

    async def generate(self, insight: Insight) -> list[Exercise]: ...


def _keywords(content: str, min_length: int) -> list[tuple[int, str]]:
    """(token index, stripped word) pairs longer than ``min_length``."""
    candidates = []
    for index, token in enumerate(content.split()):
        word = strip_punctuation(token)
        if len(word) > min_length and not is_stop_word(word):
            candidates.append((index, word))
    return candidates


def pick_distractors(
    correct_answer: str,
    pool: tuple[str, ...] = DISTRACTORS,
    fillers: tuple[str, ...] = FILLER_DISTRACTORS,
    count: int = DISTRACTOR_COUNT,
) -> list[str]:
    """Take ``count`` pool words other than the answer, padding from fillers."""
    answer = correct_answer.lower()
    chosen: list[str] = []
    for word in pool + fillers:
        if len(chosen) == count:
            break
        if word.lower() != answer and word.lower() not in (c.lower() for c in chosen):
            chosen.append(word)
    return chosen


def generate_fill_blank(insight: Insight, rng: random.Random | None = None) -> Exercise | None:
    """Blank out one meaningful word (longer than 3 letters, not a stop word)."""
    rng = rng or random.Random()
    candidates = _keywords(insight.content, min_length=3)
    if not candidates:
        return None

    index, word = rng.choice(candidates)
    tokens = insight.content.split()
    tokens[index] = BLANK

    return Exercise(
        id=str(uuid.uuid4()),
        insight_id=insight.id,
        type=ExerciseType.FILL_BLANK,
        prompt=f"Complete a lacuna: {' '.join(tokens)}",
        correct_answer=word.lower(),
        explanation=f'A palavra correta é "{word}". {insight.content}',
    )


def generate_multiple_choice(
    insight: Insight, rng: random.Random | None = None
) -> Exercise | None:
    """Ask for the central word among four options (one right, three distractors)."""
    rng = rng or random.Random()
    candidates = _keywords(insight.content, min_length=4)
    if not candidates:
        return None

    _, correct_answer = rng.choice(candidates)
    options = [correct_answer, *pick_distractors(correct_answer)]
    rng.shuffle(options)

    excerpt = insight.content[:PROMPT_EXCERPT_LENGTH]
    return Exercise(
        id=str(uuid.uuid4()),
        insight_id=insight.id,
        type=ExerciseType.MULTIPLE_CHOICE,
        prompt=f'Qual conceito é central neste insight: "{excerpt}..."?',
        options=options,
        correct_answer=correct_answer.lower(),
        explanation=f'O conceito central é "{correct_answer}". {insight.content}',
    )


def generate_open_answer(insight: Insight, rng: random.Random | None = None) -> Exercise:
    """Reflection question; the content is only a reference answer."""
    rng = rng or random.Random()
    explanation = f"Resposta de referência: {insight.content}"
    if insight.note:
        explanation += f" Nota adicional: {insight.note}"

    return Exercise(
        id=str(uuid.uuid4()),
        insight_id=insight.id,
        type=ExerciseType.OPEN_ANSWER,
        prompt=rng.choice(OPEN_ANSWER_PROMPTS),
        correct_answer=insight.content,
        explanation=explanation,
    )


def generate_exercises(insight: Insight, rng: random.Random | None = None) -> list[Exercise]:
    """Up to one exercise of each type, in fill-blank, multiple-choice, open-answer order."""
    rng = rng or random.Random()
    exercises = []

    fill_blank = generate_fill_blank(insight, rng)
    if fill_blank:
        exercises.append(fill_blank)

    multiple_choice = generate_multiple_choice(insight, rng)
    if multiple_choice:
        exercises.append(multiple_choice)

    exercises.append(generate_open_answer(insight, rng))
    return exercises


def is_correct(exercise: Exercise, answer: str) -> bool:
    """Exact match after trimming and case folding."""
    return answer.strip().lower() == exercise.correct_answer.strip().lower()


class BaseExerciseGenerator:
    """Heuristic generator picking words at random."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    async def generate(self, insight: Insight) -> list[Exercise]:
        return generate_exercises(insight, self.rng)
