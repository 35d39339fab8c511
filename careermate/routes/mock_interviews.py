"""Mock Interview Routes"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from careermate.database import get_db
from careermate.models.mock_interview import MockInterview
from careermate.models.user import User
from careermate.middleware.auth import get_current_user
from careermate.middleware.rate_limit import limiter, AI_LIMIT
from careermate.routes.records import list_recent, delete_owned
from careermate.schemas.career import MockInterviewRequest, EvaluateAnswerRequest, missing_fields
from careermate.services.career_ai import CareerAIService, get_career_ai_service
from careermate.services.shape_normalizer import normalize

router = APIRouter()

PENDING_SUMMARY = "Complete the interview to get your overall score and summary."


@router.post("/mock-interview")
@limiter.limit(AI_LIMIT)
async def create_mock_interview(
    request: Request,
    data: MockInterviewRequest,
    current_user: User = Depends(get_current_user),
    ai: CareerAIService = Depends(get_career_ai_service),
    db: AsyncSession = Depends(get_db),
):
    if missing_fields(data, ["role"]):
        raise HTTPException(status_code=400, detail="Job role is required")

    role = data.role.strip()
    generated = await ai.generate_mock_interview(role)
    questions = normalize(generated.get("questions"), "sequence of interview questions")

    interview = MockInterview(
        user_id=current_user.id,
        role=role,
        questions=questions,
        answers=[],
        overall_score=0,
        summary=PENDING_SUMMARY,
        completed=False,
    )
    db.add(interview)
    await db.commit()
    await db.refresh(interview)

    return {
        **generated,
        "id": interview.id,
        "questions": questions,
        "feedback": [{"score": 0, "feedback": "", "improvements": []} for _ in questions],
        "overallScore": 0,
        "summary": PENDING_SUMMARY,
    }


@router.post("/evaluate-answer")
@limiter.limit(AI_LIMIT)
async def evaluate_answer(
    request: Request,
    data: EvaluateAnswerRequest,
    ai: CareerAIService = Depends(get_career_ai_service),
):
    if missing_fields(data, ["question", "answer", "role"]):
        raise HTTPException(status_code=400, detail="Question, answer, and role are required")

    return await ai.evaluate_interview_answer(data.question, data.answer, data.role)


@router.get("/mock-interviews")
async def list_mock_interviews(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_recent(db, MockInterview, current_user)


@router.delete("/mock-interviews/{interview_id}")
async def delete_mock_interview(
    interview_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_owned(db, MockInterview, interview_id, current_user, "Mock interview not found")
    return {"message": "Mock interview deleted successfully"}
