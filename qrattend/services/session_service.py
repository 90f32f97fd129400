"""Class session lifecycle: creation, token rotation, expiry and deactivation."""
import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from qrattend import db
from qrattend.errors import (
    InternalError, InvalidState, NotAuthorized, SessionInactive,
    SessionNotFound, TokenExpired
)
from qrattend.models.class_session import ClassSession
from qrattend.models.course import Course
from qrattend.models.user import User
from qrattend.services.token_service import TokenService
from qrattend.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

FRESHNESS_SECONDS = 120
MAX_TOKEN_RETRIES = 5
DEFAULT_RADIUS_METERS = 100

class SessionService:
    """
    State machine for class sessions.

    Active -> Inactive. Inactive is terminal: no rotation, no check-ins.
    A token expires FRESHNESS_SECONDS after its last rotation even while
    the session stays active, so a photographed QR code goes stale on
    its own.
    """

    @staticmethod
    def freshness_window() -> timedelta:
        return timedelta(seconds=current_app.config.get('QR_TOKEN_FRESHNESS_SECONDS', FRESHNESS_SECONDS))

    @staticmethod
    def _max_retries() -> int:
        return current_app.config.get('QR_TOKEN_MAX_RETRIES', MAX_TOKEN_RETRIES)

    @classmethod
    def create_session(
        cls,
        course: Course,
        teacher: User,
        session_date: date,
        start_time: datetime,
        end_time: Optional[datetime] = None,
        geofence: Optional[Dict] = None,
        now: Optional[datetime] = None
    ) -> ClassSession:
        """Open a new session in the Active state with a fresh token."""
        now = now or utcnow()
        geofence = geofence or {}
        radius = geofence.get('radius')
        if geofence and radius is None:
            radius = current_app.config.get('DEFAULT_GEOFENCE_RADIUS_METERS', DEFAULT_RADIUS_METERS)

        for attempt in range(1, cls._max_retries() + 1):
            session = ClassSession(
                course_id=course.id,
                teacher_id=teacher.id,
                date=session_date,
                start_time=start_time,
                end_time=end_time,
                token=TokenService.new_token(course.code),
                token_rotated_at=now,
                is_active=True,
                geofence_latitude=geofence.get('latitude'),
                geofence_longitude=geofence.get('longitude'),
                geofence_radius_meters=radius
            )
            db.session.add(session)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                logger.warning("Token collision creating session for course %s (attempt %d)",
                               course.code, attempt)
                continue

            logger.info("Session %s created for course %s by teacher %s",
                        session.id, course.code, teacher.id)
            return session

        raise InternalError("Could not allocate a unique session token")

    @classmethod
    def rotate(cls, session: ClassSession, now: Optional[datetime] = None) -> str:
        """Issue a new token; the previous one stops resolving immediately."""
        for attempt in range(1, cls._max_retries() + 1):
            if not session.is_active:
                raise InvalidState("Cannot refresh QR code for inactive session")

            session.token = TokenService.new_token(session.course.code)
            session.token_rotated_at = now or utcnow()
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                logger.warning("Token collision rotating session %s (attempt %d)", session.id, attempt)
                continue

            logger.info("Session %s token rotated", session.id)
            return session.token

        raise InternalError("Could not allocate a unique session token")

    @staticmethod
    def deactivate(
        session: ClassSession,
        end_time: Optional[datetime] = None,
        now: Optional[datetime] = None
    ) -> ClassSession:
        """End the session. Deactivating an inactive session is a no-op."""
        if not session.is_active:
            return session

        session.is_active = False
        session.end_time = end_time or session.end_time or now or utcnow()
        db.session.commit()

        logger.info("Session %s deactivated", session.id)
        return session

    @classmethod
    def update(
        cls,
        session: ClassSession,
        user: User,
        active: Optional[bool] = None,
        end_time: Optional[datetime] = None
    ) -> ClassSession:
        """Owner-only update of the active flag and end time."""
        if session.teacher_id != user.id:
            raise NotAuthorized("Session not found or you do not have permission")

        if active is True and not session.is_active:
            raise InvalidState("An ended session cannot be reactivated")

        if active is False:
            return cls.deactivate(session, end_time=end_time)

        if end_time is not None:
            session.end_time = end_time
            db.session.commit()

        return session

    @classmethod
    def ensure_token_fresh(cls, session: ClassSession, now: Optional[datetime] = None) -> None:
        if not session.is_token_fresh(cls.freshness_window(), now=now):
            raise TokenExpired()

    @staticmethod
    def get_session(session_id: int) -> ClassSession:
        session = db.session.get(ClassSession, session_id)
        if session is None:
            raise SessionNotFound()
        return session

    @staticmethod
    def find_by_token(token: str) -> Optional[ClassSession]:
        return ClassSession.query.filter_by(token=token).first()

    @classmethod
    def resolve_token(cls, token: str) -> ClassSession:
        """Look up the session currently presenting ``token``."""
        session = cls.find_by_token(token)
        if session is None:
            raise SessionNotFound("Invalid QR code or session not found")
        if not session.is_active:
            raise SessionInactive("This session has ended and is no longer active")
        return session

    @staticmethod
    def list_sessions(
        user: User,
        active: Optional[bool] = None,
        course_id: Optional[int] = None
    ) -> List[ClassSession]:
        query = ClassSession.query

        if active is not None:
            query = query.filter(ClassSession.is_active == active)

        if course_id is not None:
            query = query.filter(ClassSession.course_id == course_id)

        # Teachers only see their own sessions
        if user.is_teacher():
            query = query.filter(ClassSession.teacher_id == user.id)

        return query.order_by(
            ClassSession.date.desc(),
            ClassSession.start_time.desc(),
            ClassSession.id.desc()
        ).all()
