from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from datetime import datetime
from careermate.database import Base
import bcrypt

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    # Free-form career profile (skills, interests, goals, ...) collected by the forms
    profile = Column(JSON, nullable=False, default=dict)

    # User metadata
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    last_login = Column(DateTime)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt"""
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
        return hashed.decode('utf-8')

    def set_password(self, password: str) -> None:
        self.password_hash = self.hash_password(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash"""
        if not password or not self.password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    @classmethod
    def create_user(cls, email: str, password: str, first_name: str = None, last_name: str = None, profile: dict = None):
        """Factory method to create a user with a hashed password"""
        user = cls(
            email=email.lower().strip(),
            first_name=first_name,
            last_name=last_name,
            profile=profile or {},
        )
        user.set_password(password)
        return user

    def public_profile(self) -> dict:
        """User fields safe to send to the client"""
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "profile": self.profile or {},
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
        }
