from qcm.routers import attempts, health, quizzes

__all__ = [
    "attempts",
    "health",
    "quizzes",
]
