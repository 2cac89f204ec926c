from __future__ import annotations

import random
from dataclasses import dataclass

from qcm.models.quiz import Question, QuizDefinition


@dataclass(frozen=True)
class PresentedQuestion:
    index: int
    question: Question


def present_questions(quiz: QuizDefinition, *, seed: str) -> list[PresentedQuestion]:
    """Questions in display order.

    Order is derived from `seed` (the attempt id), so a resumed attempt sees
    the same layout. `index` is always the position in the quiz definition;
    answers are keyed by it, never by display position.
    """

    rng = random.Random(f"qcm_order:{quiz.id}:{seed}")

    items = list(enumerate(quiz.questions))
    if quiz.randomize_questions:
        rng.shuffle(items)

    out: list[PresentedQuestion] = []
    for index, question in items:
        if quiz.randomize_choices and len(question.choices) > 1:
            choices = list(question.choices)
            rng.shuffle(choices)
            question = question.model_copy(update={"choices": tuple(choices)})
        out.append(PresentedQuestion(index=index, question=question))
    return out
