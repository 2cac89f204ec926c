"""Library entry points of the attempt engine.

Pure functions: the caller loads the quiz and the prior attempts, passes
`now`, and persists whatever snapshot comes back.
"""

from __future__ import annotations

from qcm.services.eligibility import next_attempt_number, start_attempt
from qcm.services.lifecycle import abandon as abandon_attempt
from qcm.services.lifecycle import complete as complete_attempt
from qcm.services.lifecycle import submit_answer, sweep_expired
from qcm.services.scoring import evaluate_pass, score_attempt, score_question
from qcm.services.validation import validate_quiz

__all__ = [
    "abandon_attempt",
    "complete_attempt",
    "evaluate_pass",
    "next_attempt_number",
    "score_attempt",
    "score_question",
    "start_attempt",
    "submit_answer",
    "sweep_expired",
    "validate_quiz",
]
