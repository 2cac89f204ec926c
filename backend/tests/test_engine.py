from datetime import timedelta

import pytest

from qcm import engine
from qcm.core.errors import AttemptNotAllowed
from qcm.models.attempt import AttemptStatus


def test_public_operations_end_to_end(two_question_quiz, t0):
    engine.validate_quiz(two_question_quiz)

    a = engine.start_attempt(two_question_quiz, "stu-1", [], t0)
    a = engine.submit_answer(a, two_question_quiz, 0, {"a"}, t0 + timedelta(minutes=1))
    a = engine.submit_answer(a, two_question_quiz, 1, {"x"}, t0 + timedelta(minutes=2))
    done = engine.complete_attempt(a, two_question_quiz, t0 + timedelta(minutes=3))

    assert done.status == AttemptStatus.completed
    assert {i: (s.earned_points, s.correct) for i, s in done.question_scores.items()} == {
        0: (5, True),
        1: (5, False),
    }
    assert done.total_score == 10

    second = engine.start_attempt(two_question_quiz, "stu-1", [done], t0 + timedelta(days=1))
    gave_up = engine.abandon_attempt(second, two_question_quiz, t0 + timedelta(days=1, minutes=2))
    assert gave_up.passed is False

    with pytest.raises(AttemptNotAllowed):
        engine.start_attempt(two_question_quiz, "stu-1", [done, gave_up], t0 + timedelta(days=2))


def test_sweep_through_public_api(two_question_quiz, t0):
    a = engine.start_attempt(two_question_quiz, "stu-1", [], t0)
    assert engine.sweep_expired(a, two_question_quiz, t0 + timedelta(minutes=10)) is a

    expired = engine.sweep_expired(a, two_question_quiz, t0 + timedelta(minutes=30, seconds=1))
    assert expired.status == AttemptStatus.expired
    assert engine.sweep_expired(expired, two_question_quiz, t0 + timedelta(hours=3)) is expired
