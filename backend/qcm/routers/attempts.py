from __future__ import annotations

from fastapi import APIRouter, Depends

from qcm.models.attempt import AttemptStatus
from qcm.schemas.attempt import AnswerRequest, AnswerResponse, AttemptOut, AttemptQuestionsResponse, attempt_out
from qcm.schemas.quiz import QuizQuestionPublic
from qcm.services.attempts import AttemptService, get_attempt_service

router = APIRouter(prefix="/attempts", tags=["attempts"])


@router.get("/{attempt_id}", response_model=AttemptOut)
def get_attempt(attempt_id: str, svc: AttemptService = Depends(get_attempt_service)):
    return attempt_out(svc.get_attempt(attempt_id))


@router.get("/{attempt_id}/questions", response_model=AttemptQuestionsResponse)
def attempt_questions(attempt_id: str, svc: AttemptService = Depends(get_attempt_service)):
    attempt, presented = svc.questions(attempt_id)
    return AttemptQuestionsResponse(
        attempt_id=attempt.id,
        expires_at=attempt.expires_at.isoformat() if attempt.expires_at else None,
        questions=[
            QuizQuestionPublic(
                index=p.index,
                type=p.question.type,
                text=p.question.text,
                points=p.question.points,
                choices=list(p.question.choices),
            )
            for p in presented
        ],
    )


@router.put("/{attempt_id}/answers/{question_index}", response_model=AnswerResponse)
def submit_answer(
    attempt_id: str,
    question_index: int,
    body: AnswerRequest,
    svc: AttemptService = Depends(get_attempt_service),
):
    attempt = svc.submit_answer(attempt_id, question_index, body.choices)
    if attempt.status == AttemptStatus.expired:
        return AnswerResponse(
            answer_recorded=False,
            message="time limit exceeded, answers after the deadline are not recorded",
            attempt=attempt_out(attempt),
        )
    return AnswerResponse(answer_recorded=True, attempt=attempt_out(attempt))


@router.post("/{attempt_id}/complete", response_model=AttemptOut)
def complete_attempt(attempt_id: str, svc: AttemptService = Depends(get_attempt_service)):
    return attempt_out(svc.complete(attempt_id))


@router.post("/{attempt_id}/abandon", response_model=AttemptOut)
def abandon_attempt(attempt_id: str, svc: AttemptService = Depends(get_attempt_service)):
    return attempt_out(svc.abandon(attempt_id))


@router.post("/{attempt_id}/sweep", response_model=AttemptOut)
def sweep_attempt(attempt_id: str, svc: AttemptService = Depends(get_attempt_service)):
    return attempt_out(svc.sweep(attempt_id))
