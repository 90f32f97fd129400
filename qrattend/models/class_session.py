"""Class session carrying the rotating QR token."""
from datetime import timedelta
from qrattend import db
from qrattend.models.base import BaseModel
from qrattend.utils.time_utils import utcnow

class ClassSession(BaseModel):
    """One class meeting that accepts check-ins while active.

    Sessions are never deleted; deactivation is the terminal state.
    """
    
    __tablename__ = 'class_sessions'
    
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=True)
    
    # Rotating QR token
    token = db.Column(db.String(128), unique=True, nullable=False, index=True)
    token_rotated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    
    # Optional geofence
    geofence_latitude = db.Column(db.Float, nullable=True)
    geofence_longitude = db.Column(db.Float, nullable=True)
    geofence_radius_meters = db.Column(db.Float, nullable=True)
    
    # Relationships
    course = db.relationship('Course', backref=db.backref('sessions', lazy='dynamic'))
    teacher = db.relationship('User')
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')
    
    @property
    def has_geofence(self) -> bool:
        return self.geofence_latitude is not None and self.geofence_longitude is not None
    
    def token_age(self, now=None) -> timedelta:
        return (now or utcnow()) - self.token_rotated_at
    
    def is_token_fresh(self, window: timedelta, now=None) -> bool:
        """A token stays valid for ``window`` after its last rotation."""
        return self.token_age(now) <= window
    
    def to_dict(self, include_token: bool = True) -> dict:
        data = super().to_dict(exclude=[] if include_token else ['token'])
        data['geofence'] = {
            'latitude': self.geofence_latitude,
            'longitude': self.geofence_longitude,
            'radius': self.geofence_radius_meters
        } if self.has_geofence else None
        for key in ('geofence_latitude', 'geofence_longitude', 'geofence_radius_meters'):
            data.pop(key, None)
        if self.course is not None:
            data['course'] = self.course.summary()
        return data
    
    def __repr__(self):
        return f'<ClassSession {self.id} course={self.course_id}>'
