"""Career Storyteller and Personality Snapshot Routes"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from careermate.database import get_db
from careermate.models.career_story import CareerStory, STORY_TYPES
from careermate.models.user import User
from careermate.middleware.auth import get_current_user, get_current_user_optional
from careermate.middleware.rate_limit import limiter, AI_LIMIT
from careermate.schemas.career import CareerStoryRequest, PersonalityRequest, missing_fields
from careermate.services.career_ai import CareerAIService, get_career_ai_service

router = APIRouter()


async def _find_slot(db: AsyncSession, user_id: int, story_type: str) -> Optional[CareerStory]:
    result = await db.execute(
        select(CareerStory).where(
            CareerStory.user_id == user_id,
            CareerStory.story_type == story_type,
        )
    )
    return result.scalar_one_or_none()


async def save_story_slot(
    db: AsyncSession, user_id: int, story_type: str, content: str, profile: dict
) -> CareerStory:
    """Insert the user's story for this type, or replace the one already in the slot"""
    story = await _find_slot(db, user_id, story_type)
    if story is not None:
        story.regenerate(content, profile)
        await db.commit()
    else:
        story = CareerStory(user_id=user_id, story_type=story_type, content=content, user_profile=profile)
        db.add(story)
        try:
            await db.commit()
        except IntegrityError:
            # A concurrent request filled the slot between the select and the insert
            await db.rollback()
            story = await _find_slot(db, user_id, story_type)
            story.regenerate(content, profile)
            await db.commit()

    await db.refresh(story)
    return story


@router.post("/career-storyteller")
@limiter.limit(AI_LIMIT)
async def generate_career_story(
    request: Request,
    data: CareerStoryRequest,
    current_user: Optional[User] = Depends(get_current_user_optional),
    ai: CareerAIService = Depends(get_career_ai_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Generate one story. Signed-in users get it saved in the slot for its type;
    generating the same type again replaces that slot's content and timestamp.
    """
    if missing_fields(data, ["storyType", "name", "currentRole"]):
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: storyType, name, and currentRole are required",
        )
    if data.storyType not in STORY_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid storyType. Expected one of: {', '.join(STORY_TYPES)}",
        )

    profile = data.profile()
    generated = await ai.generate_career_story(profile, data.storyType)
    story_text = generated.get("story")
    if not isinstance(story_text, str) or not story_text.strip():
        raise HTTPException(status_code=502, detail="AI response did not include a story. Please try again.")

    if current_user is None:
        return {"story": story_text, "type": data.storyType}

    story = await save_story_slot(db, current_user.id, data.storyType, story_text, profile)

    return {"story": story_text, **story.to_dict()}


@router.get("/career-stories")
async def list_career_stories(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(CareerStory).where(CareerStory.user_id == current_user.id)
    )
    stories = {story.story_type: story for story in result.scalars().all()}
    # Fixed slot order
    return [stories[t].to_dict() for t in STORY_TYPES if t in stories]


@router.post("/analyze-personality")
@limiter.limit(AI_LIMIT)
async def analyze_personality(
    request: Request,
    data: PersonalityRequest,
    ai: CareerAIService = Depends(get_career_ai_service),
):
    if not isinstance(data.answers, list):
        raise HTTPException(status_code=400, detail="Invalid answers format")

    return await ai.analyze_personality([str(answer) for answer in data.answers])
