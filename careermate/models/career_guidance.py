from sqlalchemy import Column, Integer, DateTime, JSON, ForeignKey
from datetime import datetime
from careermate.database import Base
from careermate.models.normalization import normalize_on_write
from careermate.services.shape_normalizer import normalize_guidance


class CareerGuidance(Base):
    """A saved career guidance session: the submitted profile and the AI guidance"""
    __tablename__ = "career_guidance"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_profile = Column(JSON, nullable=False, default=dict)

    # {careerPaths: [...], skillRecommendations: [...], actionPlan: {...}}
    guidance = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "userProfile": self.user_profile,
            "guidance": self.guidance,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


normalize_on_write(CareerGuidance, {"guidance": normalize_guidance})
