from sqlalchemy import Column, Integer, DateTime, JSON, ForeignKey
from datetime import datetime
from careermate.database import Base
from careermate.models.normalization import normalize_on_write
from careermate.services.shape_normalizer import career_path_entry, conversation_log, learning_roadmap, sequence_of


class CareerDiscovery(Base):
    __tablename__ = "career_discoveries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # {name, currentRole, primaryInterest, secondaryInterest, experience, education}
    user_profile = Column(JSON, nullable=False, default=dict)
    career_paths = Column(JSON, nullable=False, default=list)
    learning_roadmap = Column(JSON, nullable=True)
    conversation = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "userProfile": self.user_profile,
            "careerPaths": self.career_paths,
            "learningRoadmap": self.learning_roadmap,
            "conversation": self.conversation,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


normalize_on_write(CareerDiscovery, {
    "career_paths": sequence_of(career_path_entry),
    "learning_roadmap": learning_roadmap,
    "conversation": conversation_log,
})
