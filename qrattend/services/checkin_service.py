"""Check-in pipeline orchestrating every validation step."""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from qrattend import db
from qrattend.errors import (
    AlreadyMarked, AttendanceError, LocationRequired, NotAuthorized,
    NotEnrolled, OutOfRange, SessionInactive, SessionNotFound, TokenExpired,
    ValidationFailed
)
from qrattend.models.attendance import AttendanceRecord, AttendanceStatus
from qrattend.models.class_session import ClassSession
from qrattend.models.course import CourseEnrollment
from qrattend.models.user import User
from qrattend.models.verification_profile import VerificationProfile
from qrattend.services.geo_service import GeoService
from qrattend.services.ledger_service import LedgerService
from qrattend.services.session_service import SessionService
from qrattend.services.verification_service import CheckInProofs, VerificationService
from qrattend.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

class CheckInService:
    """
    Check-in flow, fail-fast in this order:
    1. resolve session          5. enrollment (skipped for the owning teacher)
    2. session active           6. no existing record
    3. token freshness          7. verification policy
    4. geofence                 8. write record
    """

    @classmethod
    def check_in(
        cls,
        actor: User,
        proofs: CheckInProofs,
        session_id: Optional[int] = None,
        token: Optional[str] = None,
        student_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        ip_address: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> AttendanceRecord:
        try:
            return cls._run(actor, proofs, session_id, token, student_id, status, ip_address, now)
        except AttendanceError as e:
            logger.info("Check-in rejected for user %s: %s", actor.id, e.code)
            raise

    @classmethod
    def _run(cls, actor, proofs, session_id, token, student_id, status, ip_address, now):
        # 1. Resolve session
        session = cls._resolve_session(session_id, token)

        # 2. Session must be active
        if not session.is_active:
            raise SessionInactive()

        # 3. Token must be current and fresh
        if token is not None and token != session.token:
            raise TokenExpired()
        SessionService.ensure_token_fresh(session, now=now)

        # 4. Geofence
        location_verified = cls._check_location(session, proofs)

        # 5. Enrollment
        attendee = cls._resolve_attendee(actor, session, student_id)
        recorded_by_teacher = attendee.id != actor.id
        if not recorded_by_teacher and not CourseEnrollment.is_enrolled(attendee.id, session.course_id):
            raise NotEnrolled()

        # 6. Duplicate check, as late as possible before the write
        if LedgerService.exists(session.id, attendee.id):
            raise AlreadyMarked()

        # 7. Verification policy
        profile = VerificationProfile.lookup(attendee.id)
        method = VerificationService.evaluate(profile, proofs, now=now)

        # 8. Record; timestamp is always server time
        if not recorded_by_teacher or status is None:
            status = AttendanceStatus.PRESENT

        record = AttendanceRecord(
            session_id=session.id,
            student_id=attendee.id,
            timestamp=now or utcnow(),
            status=status,
            location_verified=location_verified,
            verification_method=method,
            biometric_verified=proofs.biometric_verified is True,
            device_id=proofs.device_id,
            device_info=proofs.device_info,
            selfie_image=proofs.selfie_image,
            ip_address=ip_address,
            recorded_by_id=actor.id if recorded_by_teacher else None
        )
        LedgerService.record(record)

        logger.info("Attendance recorded for student %s in session %s (method=%s)",
                    attendee.id, session.id, method.value)
        return record

    @staticmethod
    def _resolve_session(session_id: Optional[int], token: Optional[str]) -> ClassSession:
        if session_id is None and token is None:
            raise ValidationFailed("sessionId or token is required")

        if session_id is None:
            session = SessionService.find_by_token(token)
            if session is None:
                raise SessionNotFound("Invalid QR code or session not found")
            return session

        return SessionService.get_session(session_id)

    @staticmethod
    def _check_location(session: ClassSession, proofs: CheckInProofs) -> bool:
        if not session.has_geofence:
            return False

        if proofs.coordinates is None:
            raise LocationRequired()

        result = GeoService.verify_location(
            proofs.coordinates.latitude,
            proofs.coordinates.longitude,
            session
        )
        if not result['is_inside']:
            raise OutOfRange(result['distance'], result['radius'])
        return True

    @staticmethod
    def _resolve_attendee(actor: User, session: ClassSession, student_id: Optional[int]) -> User:
        if student_id is None or student_id == actor.id:
            if not actor.is_student():
                raise ValidationFailed("studentId is required when recording attendance as a teacher")
            return actor

        # Only the course's teacher may record on a student's behalf
        if not (actor.is_teacher() and session.course.is_owned_by(actor.id)):
            raise NotAuthorized("You can only mark your own attendance")

        attendee = db.session.get(User, student_id)
        if attendee is None or not attendee.is_student():
            raise ValidationFailed("Student not found")
        return attendee

    @staticmethod
    def describe(record: AttendanceRecord) -> Dict[str, Any]:
        data = record.to_dict()
        session = record.session
        data['session'] = {
            'id': session.id,
            'date': session.date.isoformat(),
            'course': session.course.summary()
        }
        return data
