"""Job Suggestion Routes"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from careermate.database import get_db
from careermate.models.job_suggestion import JobSuggestion
from careermate.models.user import User
from careermate.middleware.auth import get_current_user
from careermate.middleware.rate_limit import limiter, AI_LIMIT
from careermate.routes.records import list_recent, delete_owned
from careermate.schemas.career import JobSuggestionsRequest, as_list, missing_fields
from careermate.services.career_ai import CareerAIService, get_career_ai_service

router = APIRouter()


@router.post("/job-suggestions")
@limiter.limit(AI_LIMIT)
async def create_job_suggestions(
    request: Request,
    data: JobSuggestionsRequest,
    current_user: User = Depends(get_current_user),
    ai: CareerAIService = Depends(get_career_ai_service),
    db: AsyncSession = Depends(get_db),
):
    if missing_fields(data, ["skills", "experience", "location", "preferredRole"]):
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: skills, experience, location, and preferredRole are required",
        )

    profile = {
        "skills": as_list(data.skills),
        "experience": data.experience,
        "location": data.location,
        "preferredRole": data.preferredRole,
        "education": data.education,
        "interests": as_list(data.interests),
    }
    ai_response = await ai.generate_job_suggestions(profile)

    skill_match = ai_response.get("skillMatch")
    suggestion = JobSuggestion(
        user_id=current_user.id,
        user_profile=profile,
        suggestions=ai_response.get("opportunities"),
        skill_match=skill_match if isinstance(skill_match, dict) else None,
        recommendations=ai_response.get("recommendations"),
    )
    db.add(suggestion)
    await db.commit()
    await db.refresh(suggestion)

    return {**ai_response, "id": suggestion.id}


@router.get("/job-suggestions")
async def list_job_suggestions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_recent(db, JobSuggestion, current_user)


@router.delete("/job-suggestions/{suggestion_id}")
async def delete_job_suggestion(
    suggestion_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_owned(db, JobSuggestion, suggestion_id, current_user, "Job suggestion not found")
    return {"message": "Job suggestion deleted successfully"}
