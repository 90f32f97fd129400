"""Per-student verification preferences and registered devices."""
from werkzeug.security import generate_password_hash, check_password_hash
from qrattend import db
from qrattend.models.base import BaseModel
from qrattend.utils.time_utils import utcnow

class VerificationProfile(BaseModel):
    """Which check-in factors a student must satisfy."""
    
    __tablename__ = 'verification_profiles'
    
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)
    
    require_pin = db.Column(db.Boolean, nullable=False, default=True)
    require_biometric = db.Column(db.Boolean, nullable=False, default=True)
    require_device_verification = db.Column(db.Boolean, nullable=False, default=True)
    require_selfie = db.Column(db.Boolean, nullable=False, default=False)
    
    pin_hash = db.Column(db.String(255), nullable=True)
    
    # Relationships
    student = db.relationship('User', backref=db.backref('verification_profile', uselist=False))
    devices = db.relationship(
        'RegisteredDevice',
        backref='profile',
        lazy='select',
        cascade='all, delete-orphan',
        order_by='RegisteredDevice.id'
    )
    
    PREFERENCE_FIELDS = (
        'require_pin',
        'require_biometric',
        'require_device_verification',
        'require_selfie'
    )
    
    @classmethod
    def defaults(cls, student_id: int) -> 'VerificationProfile':
        """Unsaved profile carrying the default flags."""
        return cls(
            student_id=student_id,
            require_pin=True,
            require_biometric=True,
            require_device_verification=True,
            require_selfie=False
        )

    @classmethod
    def lookup(cls, student_id: int) -> 'VerificationProfile':
        """Read-only view: the stored profile or unsaved defaults."""
        profile = cls.query.filter_by(student_id=student_id).first()
        return profile if profile is not None else cls.defaults(student_id)

    @classmethod
    def for_student(cls, student_id: int) -> 'VerificationProfile':
        """Fetch the student's profile, creating one with default flags."""
        profile = cls.query.filter_by(student_id=student_id).first()
        if profile is None:
            profile = cls.defaults(student_id)
            db.session.add(profile)
            db.session.flush()
        return profile
    
    @property
    def has_pin(self) -> bool:
        return bool(self.pin_hash)
    
    def set_pin(self, pin: str) -> None:
        """Set hashed PIN."""
        self.pin_hash = generate_password_hash(pin)
    
    def verify_pin(self, pin: str) -> bool:
        """Constant-time PIN check against the stored hash."""
        return self.has_pin and check_password_hash(self.pin_hash, pin)
    
    def find_device(self, device_id: str):
        for device in self.devices:
            if device.device_id == device_id:
                return device
        return None
    
    def preferences(self) -> dict:
        return {field: getattr(self, field) for field in self.PREFERENCE_FIELDS}
    
    def to_dict(self):
        return {
            'student_id': self.student_id,
            'security_preferences': self.preferences(),
            'has_pin': self.has_pin,
            'registered_devices': [device.to_dict() for device in self.devices]
        }

class RegisteredDevice(BaseModel):
    """A device the student has registered for check-in."""
    
    __tablename__ = 'registered_devices'
    __table_args__ = (
        db.UniqueConstraint('profile_id', 'device_id', name='uq_registered_device'),
    )
    
    profile_id = db.Column(db.Integer, db.ForeignKey('verification_profiles.id'), nullable=False, index=True)
    device_id = db.Column(db.String(255), nullable=False)
    device_name = db.Column(db.String(255), nullable=False)
    last_used_at = db.Column(db.DateTime, nullable=True)
    
    def touch(self, now=None) -> None:
        self.last_used_at = now or utcnow()
    
    def to_dict(self):
        return {
            'device_id': self.device_id,
            'device_name': self.device_name,
            'last_used_at': self.last_used_at.isoformat() if self.last_used_at else None
        }
