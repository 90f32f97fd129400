"""Student security settings API."""
from flask import Blueprint, g, request
from qrattend.services.profile_service import ProfileService
from qrattend.utils.decorators import student_required
from qrattend.utils.helpers import success_response
from qrattend.utils.validators import Validator

profile_bp = Blueprint('profile', __name__)

# camelCase request keys -> profile columns
PREFERENCE_KEYS = {
    'requirePin': 'require_pin',
    'requireBiometric': 'require_biometric',
    'requireDeviceVerification': 'require_device_verification',
    'requireSelfie': 'require_selfie'
}

@profile_bp.route('', methods=['GET'])
@student_required
def get_profile():
    profile = ProfileService.get_profile(g.current_user.id)
    return success_response(data=profile.to_dict())

@profile_bp.route('/devices', methods=['POST'])
@student_required
def register_device():
    """Register a student's device."""
    data = Validator.require_json(request.get_json(silent=True))
    profile = ProfileService.register_device(
        g.current_user.id,
        Validator.get(data, 'deviceId', 'device_id'),
        Validator.get(data, 'deviceName', 'device_name')
    )
    return success_response(
        data={'devices': [device.to_dict() for device in profile.devices]},
        message="Device registered successfully"
    )

@profile_bp.route('/devices/<string:device_id>', methods=['DELETE'])
@student_required
def remove_device(device_id):
    profile = ProfileService.remove_device(g.current_user.id, device_id)
    return success_response(
        data={'devices': [device.to_dict() for device in profile.devices]},
        message="Device removed"
    )

@profile_bp.route('/pin', methods=['POST'])
@student_required
def set_pin():
    """Set the PIN used for attendance verification."""
    data = Validator.require_json(request.get_json(silent=True))
    ProfileService.set_pin(g.current_user.id, Validator.get(data, 'pin'))
    return success_response(message="PIN set successfully")

@profile_bp.route('/security', methods=['PATCH', 'POST'])
@student_required
def update_security():
    """Update which verification factors are required."""
    data = Validator.require_json(request.get_json(silent=True))
    preferences = Validator.get(data, 'securityPreferences', 'security_preferences', default=data)
    preferences = Validator.require_json(preferences)

    normalized = {PREFERENCE_KEYS.get(key, key): value for key, value in preferences.items()}
    profile = ProfileService.update_preferences(g.current_user.id, normalized)
    return success_response(
        data={'security_preferences': profile.preferences()},
        message="Security preferences updated successfully"
    )
