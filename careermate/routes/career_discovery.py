"""Career Discovery Routes"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from careermate.database import get_db
from careermate.models.career_discovery import CareerDiscovery
from careermate.models.user import User
from careermate.middleware.auth import get_current_user
from careermate.middleware.rate_limit import limiter, AI_LIMIT
from careermate.routes.records import list_recent, delete_owned
from careermate.schemas.career import CareerDiscoveryRequest, missing_fields
from careermate.services.career_ai import CareerAIService, get_career_ai_service

router = APIRouter()


@router.post("/career-discovery")
@limiter.limit(AI_LIMIT)
async def create_career_discovery(
    request: Request,
    data: CareerDiscoveryRequest,
    current_user: User = Depends(get_current_user),
    ai: CareerAIService = Depends(get_career_ai_service),
    db: AsyncSession = Depends(get_db),
):
    if missing_fields(data, ["name", "currentRole", "primaryInterest"]):
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: name, currentRole, and primaryInterest are required",
        )

    profile = data.model_dump()
    ai_response = await ai.generate_career_discovery(profile)

    discovery = CareerDiscovery(
        user_id=current_user.id,
        user_profile=profile,
        career_paths=ai_response.get("careerPaths"),
        learning_roadmap=ai_response.get("learningRoadmap"),
        conversation=ai_response.get("conversation"),
    )
    db.add(discovery)
    await db.commit()
    await db.refresh(discovery)

    # The stored, normalized shape
    return discovery.to_dict()


@router.get("/career-discoveries")
async def list_career_discoveries(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_recent(db, CareerDiscovery, current_user)


@router.delete("/career-discoveries/{discovery_id}")
async def delete_career_discovery(
    discovery_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_owned(db, CareerDiscovery, discovery_id, current_user, "Career discovery session not found")
    return {"message": "Career discovery session deleted successfully"}
