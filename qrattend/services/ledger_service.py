"""Append-only attendance ledger."""
import logging
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from qrattend import db
from qrattend.errors import AlreadyMarked
from qrattend.models.attendance import AttendanceRecord
from qrattend.models.class_session import ClassSession
from qrattend.models.user import User

logger = logging.getLogger(__name__)

class LedgerService:
    """Stores attendance records, at most one per (session, student)."""

    @staticmethod
    def exists(session_id: int, student_id: int) -> bool:
        return AttendanceRecord.query.filter_by(
            session_id=session_id,
            student_id=student_id
        ).first() is not None

    @staticmethod
    def record(record: AttendanceRecord) -> AttendanceRecord:
        """
        Persist a new record.

        The unique index on (session_id, student_id) is the final guard
        against two concurrent check-ins; losing that race surfaces as
        AlreadyMarked like the pre-check does.
        """
        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.warning("Concurrent check-in lost the race for session %s student %s",
                           record.session_id, record.student_id)
            raise AlreadyMarked()
        return record

    @staticmethod
    def list_records(
        viewer: Optional[User] = None,
        session_id: Optional[int] = None,
        course_id: Optional[int] = None,
        student_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[AttendanceRecord]:
        """Records matching the filters, newest first."""
        query = AttendanceRecord.query

        if session_id is not None:
            query = query.filter(AttendanceRecord.session_id == session_id)

        if course_id is not None or (viewer is not None and viewer.is_teacher()):
            query = query.join(ClassSession, AttendanceRecord.session_id == ClassSession.id)
            if course_id is not None:
                query = query.filter(ClassSession.course_id == course_id)

        if student_id is not None:
            query = query.filter(AttendanceRecord.student_id == student_id)

        if viewer is not None:
            if viewer.is_student():
                # Students only see their own records
                query = query.filter(AttendanceRecord.student_id == viewer.id)
            elif viewer.is_teacher():
                # Teachers only see records of their sessions
                query = query.filter(ClassSession.teacher_id == viewer.id)

        query = query.order_by(AttendanceRecord.timestamp.desc(), AttendanceRecord.id.desc())

        if limit is None:
            limit = current_app.config.get('DEFAULT_PAGE_SIZE', 50)
        max_size = current_app.config.get('MAX_PAGE_SIZE', 500)
        query = query.limit(min(limit, max_size))

        return query.all()
