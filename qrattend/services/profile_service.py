"""Student security settings: devices, PIN and factor preferences."""
import logging
from typing import Dict

from flask import current_app

from qrattend import db
from qrattend.errors import ValidationFailed
from qrattend.models.verification_profile import RegisteredDevice, VerificationProfile
from qrattend.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

class ProfileService:
    """Service for managing a student's verification profile."""

    @staticmethod
    def get_profile(student_id: int) -> VerificationProfile:
        profile = VerificationProfile.for_student(student_id)
        db.session.commit()
        return profile

    @staticmethod
    def register_device(student_id: int, device_id: str, device_name: str) -> VerificationProfile:
        """Register a device, or refresh name and last use if already known."""
        if not device_id or not device_name:
            raise ValidationFailed("Device ID and name are required")

        profile = VerificationProfile.for_student(student_id)
        device = profile.find_device(device_id)
        if device is None:
            profile.devices.append(RegisteredDevice(
                device_id=device_id,
                device_name=device_name,
                last_used_at=utcnow()
            ))
            logger.info("Device registered for student %s", student_id)
        else:
            device.device_name = device_name
            device.touch()

        db.session.commit()
        return profile

    @staticmethod
    def remove_device(student_id: int, device_id: str) -> VerificationProfile:
        profile = VerificationProfile.for_student(student_id)
        device = profile.find_device(device_id)
        if device is None:
            raise ValidationFailed("Device is not registered")

        profile.devices.remove(device)
        db.session.commit()
        logger.info("Device removed for student %s", student_id)
        return profile

    @staticmethod
    def set_pin(student_id: int, pin: str) -> VerificationProfile:
        min_length = current_app.config.get('PIN_MIN_LENGTH', 4)
        if not isinstance(pin, str) or len(pin) < min_length:
            raise ValidationFailed(f"PIN must be at least {min_length} digits")

        profile = VerificationProfile.for_student(student_id)
        profile.set_pin(pin)
        db.session.commit()
        logger.info("PIN updated for student %s", student_id)
        return profile

    @staticmethod
    def update_preferences(student_id: int, preferences: Dict[str, bool]) -> VerificationProfile:
        """Merge the given flags into the stored preferences."""
        profile = VerificationProfile.for_student(student_id)
        for field, value in preferences.items():
            if field not in VerificationProfile.PREFERENCE_FIELDS:
                raise ValidationFailed(f"Unknown security preference: {field}")
            if not isinstance(value, bool):
                raise ValidationFailed(f"{field} must be true or false")
            setattr(profile, field, value)

        db.session.commit()
        return profile
