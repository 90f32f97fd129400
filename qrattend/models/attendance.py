"""Attendance record model with verification details."""
from enum import Enum
from qrattend import db
from qrattend.models.base import BaseModel
from qrattend.utils.time_utils import utcnow

class AttendanceStatus(Enum):
    PRESENT = 'PRESENT'
    LATE = 'LATE'
    ABSENT = 'ABSENT'

class VerificationMethod(Enum):
    NONE = 'NONE'
    DEVICE = 'DEVICE'
    PIN = 'PIN'
    BIOMETRIC = 'BIOMETRIC'
    SELFIE = 'SELFIE'

class AttendanceRecord(BaseModel):
    """Outcome of one successful check-in. Append-only."""
    
    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )
    
    session_id = db.Column(db.Integer, db.ForeignKey('class_sessions.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False, default=AttendanceStatus.PRESENT)
    
    # Verification details
    location_verified = db.Column(db.Boolean, nullable=False, default=False)
    verification_method = db.Column(db.Enum(VerificationMethod), nullable=False, default=VerificationMethod.NONE)
    biometric_verified = db.Column(db.Boolean, nullable=False, default=False)
    device_id = db.Column(db.String(255), nullable=True)
    device_info = db.Column(db.JSON, nullable=True)
    selfie_image = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)
    
    # Set when a teacher records attendance on a student's behalf
    recorded_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    
    student = db.relationship('User', foreign_keys=[student_id])
    
    def to_dict(self):
        data = super().to_dict(exclude=['selfie_image', 'updated_at'])
        data['has_selfie'] = self.selfie_image is not None
        if self.student is not None:
            data['student'] = {'id': self.student.id, 'name': self.student.name, 'email': self.student.email}
        return data
    
    def __repr__(self):
        return f'<AttendanceRecord {self.session_id}-{self.student_id}>'
