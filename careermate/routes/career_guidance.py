"""Career Guidance Routes"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from careermate.database import get_db
from careermate.models.career_guidance import CareerGuidance
from careermate.models.user import User
from careermate.middleware.auth import get_current_user
from careermate.middleware.rate_limit import limiter, AI_LIMIT
from careermate.routes.records import list_recent, delete_owned
from careermate.schemas.career import CareerGuidanceRequest, as_list, missing_fields
from careermate.services.career_ai import CareerAIService, get_career_ai_service
from careermate.utils.logger import get_logger

router = APIRouter()
logger = get_logger("routes.career_guidance")


@router.post("/career-guidance")
@limiter.limit(AI_LIMIT)
async def create_career_guidance(
    request: Request,
    data: CareerGuidanceRequest,
    current_user: User = Depends(get_current_user),
    ai: CareerAIService = Depends(get_career_ai_service),
    db: AsyncSession = Depends(get_db),
):
    if missing_fields(data, ["skills", "interests", "goals"]):
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: skills, interests, and goals are required",
        )

    profile = {
        "skills": as_list(data.skills),
        "interests": as_list(data.interests),
        "goals": as_list(data.goals),
        "experience": data.experience,
        "education": data.education,
    }
    ai_response = await ai.generate_career_guidance(profile)

    for field in ("careerPaths", "skillGaps", "learningRoadmap"):
        if field not in ai_response:
            logger.warning(f"Missing field in AI response: {field}")

    guidance = CareerGuidance(
        user_id=current_user.id,
        user_profile=profile,
        guidance={
            "careerPaths": ai_response.get("careerPaths"),
            "skillGaps": ai_response.get("skillGaps"),
            "learningRoadmap": ai_response.get("learningRoadmap"),
            "skillRecommendations": ai_response.get("skillRecommendations"),
            "actionPlan": ai_response.get("actionPlan"),
        },
    )
    db.add(guidance)
    await db.commit()
    await db.refresh(guidance)

    return {**ai_response, "id": guidance.id}


@router.get("/career-guidance")
async def list_career_guidance(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_recent(db, CareerGuidance, current_user)


@router.delete("/career-guidance/{guidance_id}")
async def delete_career_guidance(
    guidance_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_owned(db, CareerGuidance, guidance_id, current_user, "Career guidance session not found")
    return {"message": "Career guidance session deleted successfully"}
