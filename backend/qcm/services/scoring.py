"""Stateless scoring of QCM answers.

Nothing here knows about time, attempts or storage: the same functions score
a completed, an abandoned and an expired attempt.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable, Mapping

from qcm.models.attempt import QuestionScore
from qcm.models.quiz import Question, QuizDefinition


@dataclass(frozen=True)
class AttemptScore:
    question_scores: dict[int, QuestionScore]
    total_score: int
    max_score: int


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def score_question(question: Question, submitted: Iterable[str] | None) -> QuestionScore:
    points = int(question.points)
    got = frozenset(submitted or ())
    expected = frozenset(question.correct_answers)

    if not got:
        return QuestionScore(earned_points=0, max_points=points, correct=False)

    if got == expected:
        return QuestionScore(earned_points=points, max_points=points, correct=True)

    # Partial credit only exists for questions with several correct answers.
    if len(expected) > 1:
        hit = len(got & expected)
        miss = len(got - expected)
        raw = max(Fraction(0), Fraction(hit - miss, len(expected)))
        return QuestionScore(earned_points=_round_half_up(raw * points), max_points=points, correct=False)

    return QuestionScore(earned_points=0, max_points=points, correct=False)


def score_attempt(quiz: QuizDefinition, answers: Mapping[int, Iterable[str]] | None) -> AttemptScore:
    answers = answers or {}
    question_scores: dict[int, QuestionScore] = {}
    for index, question in enumerate(quiz.questions):
        question_scores[index] = score_question(question, answers.get(index))

    return AttemptScore(
        question_scores=question_scores,
        total_score=sum(s.earned_points for s in question_scores.values()),
        max_score=quiz.max_score,
    )


def evaluate_pass(total_score: int, quiz: QuizDefinition) -> bool | None:
    if quiz.passing_score is None:
        return None
    return int(total_score) >= int(quiz.passing_score)


def score_percentage(total_score: int, max_score: int) -> int:
    if max_score <= 0:
        return 0
    return _round_half_up(Fraction(int(total_score) * 100, int(max_score)))
