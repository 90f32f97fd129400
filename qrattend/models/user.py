"""User model for teachers and students."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from qrattend import db
from qrattend.models.base import BaseModel

class UserRole(Enum):
    """User roles enumeration."""
    STUDENT = 'STUDENT'
    TEACHER = 'TEACHER'

class User(BaseModel):
    """User model for all system users.

    Account management lives outside this service; the table exists so
    sessions and attendance records can reference their owners.
    """
    
    __tablename__ = 'users'
    
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)
    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.STUDENT)
    
    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)
    
    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)
    
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER
    
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT
    
    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        exclude = (exclude or []) + ['password_hash']
        return super().to_dict(exclude=exclude)
    
    def __repr__(self) -> str:
        return f'<User {self.email}>'
