# Database models package
from careermate.models.user import User
from careermate.models.career_guidance import CareerGuidance
from careermate.models.mock_interview import MockInterview
from careermate.models.job_suggestion import JobSuggestion
from careermate.models.career_discovery import CareerDiscovery
from careermate.models.career_story import CareerStory, STORY_TYPES

__all__ = [
    "User",
    "CareerGuidance",
    "MockInterview",
    "JobSuggestion",
    "CareerDiscovery",
    "CareerStory",
    "STORY_TYPES",
]
