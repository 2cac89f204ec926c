from __future__ import annotations


class EngineError(Exception):
    """Base class for every failure the attempt engine reports.

    `error_code` and `status_code` are what the HTTP layer puts on the wire.
    """

    error_code = "engine_error"
    status_code = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message())

    def default_message(self) -> str:
        return "request failed"

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.default_message()


class QuizValidationError(EngineError):
    error_code = "invalid_quiz"
    status_code = 422


class EmptyQuiz(QuizValidationError):
    error_code = "empty_quiz"

    def default_message(self) -> str:
        return "quiz has no questions"


class InvalidQuestion(QuizValidationError):
    error_code = "invalid_question"

    def __init__(self, index: int, reason: str):
        self.index = int(index)
        self.reason = reason
        super().__init__(f"question {self.index}: {reason}")


class AttemptNotAllowed(EngineError):
    error_code = "attempt_not_allowed"
    status_code = 403

    def __init__(self, max_attempts: int | None = None, attempts_used: int | None = None):
        self.max_attempts = max_attempts
        self.attempts_used = attempts_used
        super().__init__()

    def default_message(self) -> str:
        return "no attempts remaining"


class AttemptAlreadyTerminal(EngineError):
    error_code = "attempt_already_terminal"
    status_code = 409

    def __init__(self, attempt_id: str, status: str):
        self.attempt_id = attempt_id
        self.status = status
        super().__init__(f"attempt already submitted (status={status})")


class UnknownQuestion(EngineError):
    error_code = "unknown_question"
    status_code = 422

    def __init__(self, index: int, question_count: int):
        self.index = index
        self.question_count = question_count
        super().__init__(f"unknown question index {index} (quiz has {question_count} questions)")


class UnknownChoice(EngineError):
    error_code = "unknown_choice"
    status_code = 422

    def __init__(self, index: int, choice_ids: list[str]):
        self.index = index
        self.choice_ids = choice_ids
        super().__init__(f"question {index}: unknown choice ids {', '.join(choice_ids)}")


class AttemptBusy(EngineError):
    error_code = "attempt_busy"
    status_code = 409

    def __init__(self, attempt_id: str):
        self.attempt_id = attempt_id
        super().__init__(f"another transition is in flight for attempt {attempt_id}")


class QuizNotFound(EngineError):
    error_code = "quiz_not_found"
    status_code = 404

    def default_message(self) -> str:
        return "quiz not found"


class AttemptNotFound(EngineError):
    error_code = "attempt_not_found"
    status_code = 404

    def default_message(self) -> str:
        return "attempt not found"


class QuizMismatch(EngineError):
    error_code = "quiz_mismatch"
    status_code = 409

    def default_message(self) -> str:
        return "attempt does not belong to this quiz"
