"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .course import Course, CourseEnrollment
from .class_session import ClassSession
from .verification_profile import VerificationProfile, RegisteredDevice
from .attendance import AttendanceRecord, AttendanceStatus, VerificationMethod

__all__ = [
    'BaseModel', 'User', 'UserRole',
    'Course', 'CourseEnrollment', 'ClassSession',
    'VerificationProfile', 'RegisteredDevice',
    'AttendanceRecord', 'AttendanceStatus', 'VerificationMethod'
]
