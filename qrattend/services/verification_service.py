"""Per-student multi-factor verification policy."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from qrattend import db
from qrattend.errors import (
    BiometricRequired, InvalidPin, PinNotConfigured, SelfieRequired,
    UnrecognizedDevice
)
from qrattend.models.attendance import VerificationMethod
from qrattend.models.verification_profile import VerificationProfile

logger = logging.getLogger(__name__)

@dataclass
class Coordinates:
    latitude: float
    longitude: float

@dataclass
class CheckInProofs:
    """Everything a student submits alongside a check-in.

    ``None`` means the proof was not supplied at all.
    """
    pin: Optional[str] = None
    biometric_verified: Optional[bool] = None
    selfie_image: Optional[str] = None
    device_id: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    device_info: Optional[Dict[str, Any]] = None

    @property
    def has_selfie(self) -> bool:
        return self.selfie_image is not None and len(self.selfie_image) > 0

class VerificationService:
    """
    Evaluates a student's enabled factors against submitted proofs.

    Order: device -> PIN -> biometric -> selfie. The first failure wins.
    The recorded method is the last enabled factor that passed; with no
    factor enabled the method is NONE.
    """

    @staticmethod
    def evaluate(
        profile: VerificationProfile,
        proofs: CheckInProofs,
        now: Optional[datetime] = None
    ) -> VerificationMethod:
        method = VerificationMethod.NONE

        # 1. Device
        if profile.require_device_verification:
            if proofs.device_id is None:
                raise UnrecognizedDevice("Device verification is required")

            device = profile.find_device(proofs.device_id)
            if device is None:
                raise UnrecognizedDevice()

            # Committed immediately; harmless if a later step rejects
            device.touch(now)
            db.session.commit()
            method = VerificationMethod.DEVICE

        # 2. PIN
        if profile.require_pin:
            if proofs.pin is None:
                raise InvalidPin("PIN verification is required")
            if not profile.has_pin:
                raise PinNotConfigured()
            if not profile.verify_pin(proofs.pin):
                raise InvalidPin()
            method = VerificationMethod.PIN

        # 3. Biometric, asserted by the client
        if profile.require_biometric:
            if proofs.biometric_verified is not True:
                raise BiometricRequired()
            method = VerificationMethod.BIOMETRIC

        # 4. Selfie
        if profile.require_selfie:
            if not proofs.has_selfie:
                raise SelfieRequired()
            method = VerificationMethod.SELFIE

        logger.debug("Verification for student %s passed with method %s",
                     profile.student_id, method.value)
        return method
