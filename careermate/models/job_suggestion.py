from sqlalchemy import Column, Integer, DateTime, JSON, ForeignKey
from datetime import datetime
from careermate.database import Base
from careermate.models.normalization import normalize_on_write
from careermate.services.shape_normalizer import sequence_of


class JobSuggestion(Base):
    __tablename__ = "job_suggestions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_profile = Column(JSON, nullable=False, default=dict)

    # opportunities returned by the model
    suggestions = Column(JSON, nullable=False, default=list)
    skill_match = Column(JSON, nullable=True)
    recommendations = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "userProfile": self.user_profile,
            "suggestions": self.suggestions,
            "skillMatch": self.skill_match or {},
            "recommendations": self.recommendations,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


normalize_on_write(JobSuggestion, {"suggestions": sequence_of(), "recommendations": sequence_of()})
