from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey, UniqueConstraint
from datetime import datetime
from careermate.database import Base
from careermate.services.prompts import STORY_TYPES  # noqa: F401


class CareerStory(Base):
    """One story slot per (user, story_type); regenerating replaces content and timestamp"""
    __tablename__ = "career_stories"
    __table_args__ = (UniqueConstraint("user_id", "story_type", name="uq_career_story_slot"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    story_type = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    user_profile = Column(JSON, nullable=False, default=dict)
    generated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def regenerate(self, content: str, user_profile: dict = None) -> None:
        self.content = content
        if user_profile is not None:
            self.user_profile = user_profile
        self.generated_at = datetime.utcnow()

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.story_type,
            "content": self.content,
            "timestamp": int(self.generated_at.timestamp() * 1000) if self.generated_at else None,
        }
