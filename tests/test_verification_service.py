"""Tests for the per-student verification policy."""
from datetime import datetime

import pytest

from qrattend.errors import (
    BiometricRequired, InvalidPin, PinNotConfigured, SelfieRequired, UnrecognizedDevice
)
from qrattend.models.attendance import VerificationMethod
from qrattend.models.verification_profile import VerificationProfile
from qrattend.services.verification_service import CheckInProofs, VerificationService

ALL_FACTORS = dict(
    require_device_verification=True,
    require_pin=True,
    require_biometric=True,
    require_selfie=True
)

def test_no_factors_enabled_gives_none(student, profile_for):
    profile = profile_for(student)
    assert VerificationService.evaluate(profile, CheckInProofs()) == VerificationMethod.NONE

def test_default_profile_requires_device_pin_and_biometric(student):
    profile = VerificationProfile.lookup(student.id)
    assert profile.id is None
    assert profile.require_device_verification
    assert profile.require_pin
    assert profile.require_biometric
    assert not profile.require_selfie

def test_registered_device_passes_and_is_touched(student, profile_for):
    profile = profile_for(student, devices=['dev-1'], require_device_verification=True)
    now = datetime(2026, 10, 18, 9, 0)

    method = VerificationService.evaluate(profile, CheckInProofs(device_id='dev-1'), now=now)

    assert method == VerificationMethod.DEVICE
    assert profile.find_device('dev-1').last_used_at == now

def test_unknown_device_rejected(student, profile_for):
    profile = profile_for(student, devices=['dev-1'], require_device_verification=True)
    with pytest.raises(UnrecognizedDevice):
        VerificationService.evaluate(profile, CheckInProofs(device_id='dev-2'))

def test_missing_device_rejected(student, profile_for):
    profile = profile_for(student, devices=['dev-1'], require_device_verification=True)
    with pytest.raises(UnrecognizedDevice, match='Device verification is required'):
        VerificationService.evaluate(profile, CheckInProofs())

def test_pin_checks(student, profile_for):
    profile = profile_for(student, pin='4321', require_pin=True)

    assert VerificationService.evaluate(profile, CheckInProofs(pin='4321')) == VerificationMethod.PIN
    with pytest.raises(InvalidPin):
        VerificationService.evaluate(profile, CheckInProofs(pin='0000'))
    with pytest.raises(InvalidPin, match='PIN verification is required'):
        VerificationService.evaluate(profile, CheckInProofs())

def test_pin_required_but_not_configured(student, profile_for):
    profile = profile_for(student, require_pin=True)
    with pytest.raises(PinNotConfigured):
        VerificationService.evaluate(profile, CheckInProofs(pin='1234'))

def test_biometric_needs_explicit_true(student, profile_for):
    profile = profile_for(student, require_biometric=True)

    with pytest.raises(BiometricRequired):
        VerificationService.evaluate(profile, CheckInProofs())
    with pytest.raises(BiometricRequired):
        VerificationService.evaluate(profile, CheckInProofs(biometric_verified=False))
    assert VerificationService.evaluate(
        profile, CheckInProofs(biometric_verified=True)) == VerificationMethod.BIOMETRIC

def test_selfie_must_be_present(student, profile_for):
    profile = profile_for(student, require_selfie=True)

    with pytest.raises(SelfieRequired):
        VerificationService.evaluate(profile, CheckInProofs(selfie_image=''))
    assert VerificationService.evaluate(
        profile, CheckInProofs(selfie_image='data:image/jpeg;base64,AAAA')) == VerificationMethod.SELFIE

def test_wrong_pin_reported_before_later_factors(student, profile_for):
    profile = profile_for(student, pin='4321', devices=['dev-1'], **ALL_FACTORS)
    proofs = CheckInProofs(device_id='dev-1', pin='9999')

    with pytest.raises(InvalidPin):
        VerificationService.evaluate(profile, proofs)

def test_last_enabled_factor_is_recorded(student, profile_for):
    profile = profile_for(student, devices=['dev-1'],
                          require_device_verification=True, require_biometric=True)
    proofs = CheckInProofs(device_id='dev-1', biometric_verified=True)

    assert VerificationService.evaluate(profile, proofs) == VerificationMethod.BIOMETRIC

def test_all_factors_record_selfie(student, profile_for):
    profile = profile_for(student, pin='4321', devices=['dev-1'], **ALL_FACTORS)
    proofs = CheckInProofs(device_id='dev-1', pin='4321', biometric_verified=True, selfie_image='img')

    assert VerificationService.evaluate(profile, proofs) == VerificationMethod.SELFIE
