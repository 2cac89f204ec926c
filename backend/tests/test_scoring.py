from itertools import combinations

from qcm.models.quiz import QuizDefinition
from qcm.services.scoring import evaluate_pass, score_attempt, score_percentage, score_question

from factories import multi, single


def _all_subsets(ids: str):
    for n in range(len(ids) + 1):
        for combo in combinations(ids, n):
            yield set(combo)


def test_scenario_single_full_and_multi_partial(two_question_quiz):
    scored = score_attempt(two_question_quiz, {0: {"a"}, 1: {"x"}})

    assert scored.question_scores[0].earned_points == 5
    assert scored.question_scores[0].correct is True
    assert scored.question_scores[1].earned_points == 5
    assert scored.question_scores[1].correct is False
    assert scored.question_scores[1].max_points == 10
    assert scored.total_score == 10
    assert scored.max_score == 15


def test_empty_submission_scores_zero():
    s = score_question(multi({"x", "y"}, points=4), set())
    assert s.earned_points == 0
    assert s.correct is False

    assert score_question(single("a", points=3), None).earned_points == 0


def test_exact_multi_match_is_full_credit_regardless_of_order():
    s = score_question(multi({"x", "y", "z"}, points=6), ["z", "x", "y"])
    assert s.earned_points == 6
    assert s.correct is True


def test_full_complement_scores_zero():
    q = multi({"x", "y"}, points=10)
    s = score_question(q, {"w", "z"})
    assert s.earned_points == 0
    assert s.correct is False


def test_wrong_selections_cancel_right_ones():
    q = multi({"x", "y"}, points=10)
    # hit=2, miss=1, total=2 -> 0.5
    assert score_question(q, {"x", "y", "w"}).earned_points == 5
    # hit=1, miss=1 -> 0
    assert score_question(q, {"x", "w"}).earned_points == 0


def test_partial_credit_rounds_half_up():
    # raw 1/2 of 1 point -> 1 (banker's rounding would give 0)
    assert score_question(multi({"x", "y"}, points=1), {"x"}).earned_points == 1
    # 2/3 of 5 = 3.33 -> 3, 1/3 of 5 = 1.67 -> 2
    q = multi({"w", "x", "y"}, points=5)
    assert score_question(q, {"w", "x"}).earned_points == 3
    assert score_question(q, {"w"}).earned_points == 2


def test_single_choice_has_no_partial_credit():
    q = single("a", points=5)
    assert score_question(q, {"b"}).earned_points == 0
    assert score_question(q, {"a", "b"}).earned_points == 0
    assert score_question(q, {"a"}).earned_points == 5


def test_earned_points_always_within_bounds():
    questions = [
        single("b", points=3),
        multi({"x"}, points=4),
        multi({"w", "x"}, points=7),
        multi({"w", "x", "y"}, points=5),
        multi({"w", "x", "y", "z"}, points=9),
    ]
    for q in questions:
        ids = "".join(c.id for c in q.choices)
        for submitted in _all_subsets(ids):
            s = score_question(q, submitted)
            assert 0 <= s.earned_points <= q.points
            assert s.correct == (submitted == set(q.correct_answers))


def test_missing_answers_are_scored_as_empty(two_question_quiz):
    scored = score_attempt(two_question_quiz, {1: {"x", "y"}})
    assert set(scored.question_scores) == {0, 1}
    assert scored.question_scores[0].earned_points == 0
    assert scored.total_score == 10


def test_answers_outside_the_quiz_are_ignored(two_question_quiz):
    scored = score_attempt(two_question_quiz, {0: {"a"}, 7: {"a"}})
    assert set(scored.question_scores) == {0, 1}
    assert scored.total_score == 5


def test_evaluate_pass(two_question_quiz):
    assert evaluate_pass(12, two_question_quiz) is True
    assert evaluate_pass(11, two_question_quiz) is False

    ungraded = QuizDefinition(id="q", questions=(single("a"),))
    assert evaluate_pass(1, ungraded) is None


def test_score_percentage():
    assert score_percentage(10, 15) == 67
    assert score_percentage(15, 15) == 100
    assert score_percentage(1, 8) == 13
    assert score_percentage(0, 0) == 0
