"""
Pydantic schemas for the career endpoints.

Required fields are Optional here and checked in the routes so a missing field
is answered with a 400 naming every required field, as the front end expects.
"""
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict

# Form inputs arrive either as lists or as comma separated text
TextOrList = Union[List[str], str]


class CareerGuidanceRequest(BaseModel):
    skills: Optional[TextOrList] = None
    interests: Optional[TextOrList] = None
    goals: Optional[TextOrList] = None
    experience: Optional[str] = None
    education: Optional[str] = None


class MockInterviewRequest(BaseModel):
    role: Optional[str] = None


class EvaluateAnswerRequest(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None
    role: Optional[str] = None


class JobSuggestionsRequest(BaseModel):
    skills: Optional[TextOrList] = None
    experience: Optional[str] = None
    location: Optional[str] = None
    preferredRole: Optional[str] = None
    education: Optional[str] = None
    interests: Optional[TextOrList] = None


class CareerDiscoveryRequest(BaseModel):
    name: Optional[str] = None
    currentRole: Optional[str] = None
    primaryInterest: Optional[str] = None
    secondaryInterest: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None


class CareerStoryRequest(BaseModel):
    """storyType plus whatever profile fields the storyteller form collected"""
    model_config = ConfigDict(extra="allow")

    storyType: Optional[str] = None
    name: Optional[str] = None
    currentRole: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    keySkills: List[str] = []
    achievements: List[str] = []
    careerGoals: Optional[str] = None
    personalInterests: List[str] = []

    def profile(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"storyType"}, exclude_none=True)


class PersonalityRequest(BaseModel):
    answers: Any = None


def missing_fields(data: BaseModel, required: List[str]) -> List[str]:
    """Required fields that are absent or blank"""
    missing = []
    for field in required:
        value = getattr(data, field, None)
        if isinstance(value, str):
            value = value.strip()
        if not value:
            missing.append(field)
    return missing


def as_list(value: Optional[TextOrList]) -> List[str]:
    """Normalize comma separated text or a list into a list of trimmed strings"""
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]
