from __future__ import annotations

from qcm.core.errors import EmptyQuiz, InvalidQuestion
from qcm.models.quiz import Question, QuestionType, QuizDefinition


def _question_problem(question: Question) -> str | None:
    if int(question.points) <= 0:
        return "points must be positive"

    seen: set[str] = set()
    for choice in question.choices:
        if choice.id in seen:
            return f"duplicate choice id {choice.id!r}"
        seen.add(choice.id)

    if not question.correct_answers:
        return "no correct answer"

    unknown = sorted(question.correct_answers - seen)
    if unknown:
        return f"correct answers not among choices: {', '.join(unknown)}"

    if question.type == QuestionType.single_choice and len(question.correct_answers) != 1:
        return "single_choice question must have exactly one correct answer"

    return None


def validate_quiz(quiz: QuizDefinition) -> None:
    """Raise `EmptyQuiz` or `InvalidQuestion` for the first problem found."""

    if not quiz.questions:
        raise EmptyQuiz()

    for index, question in enumerate(quiz.questions):
        problem = _question_problem(question)
        if problem:
            raise InvalidQuestion(index, problem)
