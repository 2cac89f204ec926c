from qcm.models.quiz import Choice, Question, QuestionType, QuizDefinition
from qcm.models.attempt import Attempt, AttemptStatus, QuestionScore

__all__ = [
    "Attempt",
    "AttemptStatus",
    "Choice",
    "Question",
    "QuestionScore",
    "QuestionType",
    "QuizDefinition",
]
