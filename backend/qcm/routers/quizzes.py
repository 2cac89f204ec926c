from __future__ import annotations

from fastapi import APIRouter, Depends

from qcm.schemas.attempt import AttemptStartRequest, AttemptStartResponse, AttemptSummaryResponse, attempt_out
from qcm.schemas.quiz import QuizResponse, QuizUpsertRequest, quiz_response
from qcm.services.attempts import AttemptService, get_attempt_service

router = APIRouter(prefix="/quizzes", tags=["quizzes"])


@router.put("/{quiz_id}", response_model=QuizResponse)
def put_quiz(quiz_id: str, body: QuizUpsertRequest, svc: AttemptService = Depends(get_attempt_service)):
    quiz = svc.put_quiz(body.to_definition(quiz_id))
    return quiz_response(quiz)


@router.get("/{quiz_id}", response_model=QuizResponse)
def get_quiz(quiz_id: str, svc: AttemptService = Depends(get_attempt_service)):
    return quiz_response(svc.get_quiz(quiz_id))


@router.post("/{quiz_id}/attempts", response_model=AttemptStartResponse)
def start_attempt(quiz_id: str, body: AttemptStartRequest, svc: AttemptService = Depends(get_attempt_service)):
    attempt, resumed = svc.start(quiz_id, body.student_id)
    return AttemptStartResponse(resumed=resumed, attempt=attempt_out(attempt))


@router.get("/{quiz_id}/students/{student_id}/summary", response_model=AttemptSummaryResponse)
def attempt_summary(quiz_id: str, student_id: str, svc: AttemptService = Depends(get_attempt_service)):
    return svc.summary(quiz_id, student_id)
