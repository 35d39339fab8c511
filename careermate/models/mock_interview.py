from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, Float, JSON, ForeignKey
from datetime import datetime
from careermate.database import Base
from careermate.models.normalization import normalize_on_write
from careermate.services.shape_normalizer import sequence_of


class MockInterview(Base):
    __tablename__ = "mock_interviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(255), nullable=False)

    # [{question, tips, category}]
    questions = Column(JSON, nullable=False, default=list)
    # [{question, answer, feedback: {score, feedback, improvements}}]
    answers = Column(JSON, nullable=False, default=list)

    overall_score = Column(Float, default=0)
    summary = Column(Text)
    completed = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "role": self.role,
            "questions": self.questions,
            "answers": self.answers,
            "overallScore": self.overall_score,
            "summary": self.summary,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


normalize_on_write(MockInterview, {"questions": sequence_of(), "answers": sequence_of()})
