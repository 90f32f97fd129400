"""Shared fixtures for the attendance tests."""
from datetime import datetime, date

import pytest
from flask_jwt_extended import create_access_token

from qrattend import create_app, db
from qrattend.models.user import User, UserRole
from qrattend.models.course import Course, CourseEnrollment
from qrattend.models.verification_profile import RegisteredDevice, VerificationProfile
from qrattend.services.session_service import SessionService

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

def make_user(email, name, role):
    user = User(email=email, name=name, role=role)
    user.set_password('password123')
    return user.save()

@pytest.fixture
def teacher(app):
    return make_user('teacher@example.com', 'Teacher One', UserRole.TEACHER)

@pytest.fixture
def other_teacher(app):
    return make_user('teacher2@example.com', 'Teacher Two', UserRole.TEACHER)

@pytest.fixture
def student(app):
    return make_user('student@example.com', 'Student One', UserRole.STUDENT)

@pytest.fixture
def other_student(app):
    return make_user('student2@example.com', 'Student Two', UserRole.STUDENT)

@pytest.fixture
def course(teacher):
    return Course(name='Data Structures', code='CS201', section='A',
                  semester=3, teacher_id=teacher.id).save()

@pytest.fixture
def enrolled(student, course):
    CourseEnrollment(student_id=student.id, course_id=course.id).save()
    return student

def set_profile(student, pin=None, devices=(), **flags):
    """Store a verification profile; every factor is off unless enabled."""
    profile = VerificationProfile.for_student(student.id)
    for field in VerificationProfile.PREFERENCE_FIELDS:
        setattr(profile, field, flags.get(field, False))
    if pin is not None:
        profile.set_pin(pin)
    for device_id in devices:
        profile.devices.append(RegisteredDevice(device_id=device_id, device_name=f'Phone {device_id}'))
    db.session.commit()
    return profile

@pytest.fixture
def open_session(course, teacher):
    """Factory for active sessions of ``course``."""
    def factory(geofence=None, now=None):
        return SessionService.create_session(
            course=course,
            teacher=teacher,
            session_date=date(2026, 10, 18),
            start_time=datetime(2026, 10, 18, 9, 0),
            geofence=geofence,
            now=now
        )
    return factory

@pytest.fixture
def auth_headers(app):
    def headers(user):
        token = create_access_token(identity=str(user.id))
        return {'Authorization': f'Bearer {token}'}
    return headers

@pytest.fixture
def profile_for(app):
    return set_profile
