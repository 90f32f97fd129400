"""Typed business errors raised by the check-in core.

Every error carries a stable ``code`` and a human readable ``message``.
``http_status`` is only consulted by the API layer when rendering the
JSON error envelope.
"""


class AttendanceError(Exception):
    """Base class for every user-actionable attendance error."""

    code = 'ATTENDANCE_ERROR'
    http_status = 400
    default_message = 'Attendance request rejected'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'code': self.code, 'message': self.message}


class SessionNotFound(AttendanceError):
    code = 'SESSION_NOT_FOUND'
    http_status = 404
    default_message = 'Session not found'


class SessionInactive(AttendanceError):
    code = 'SESSION_INACTIVE'
    default_message = 'Session is no longer active'


class TokenExpired(AttendanceError):
    code = 'TOKEN_EXPIRED'
    default_message = 'QR code has expired. Please scan the latest QR code.'


class LocationRequired(AttendanceError):
    code = 'LOCATION_REQUIRED'
    default_message = 'Location verification is required for this session'


class OutOfRange(AttendanceError):
    code = 'OUT_OF_RANGE'

    def __init__(self, distance: float, radius: float):
        self.distance = round(distance)
        self.radius = radius
        super().__init__(
            f'You are {self.distance}m away from the classroom. '
            f'You must be within {_format_meters(radius)}m to mark attendance.'
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(distance=self.distance, radius=self.radius)
        return data


class NotEnrolled(AttendanceError):
    code = 'NOT_ENROLLED'
    http_status = 403
    default_message = 'Student is not enrolled in this course'


class AlreadyMarked(AttendanceError):
    code = 'ALREADY_MARKED'
    http_status = 409
    default_message = 'Attendance already marked for this student'


class UnrecognizedDevice(AttendanceError):
    code = 'UNRECOGNIZED_DEVICE'
    http_status = 401
    default_message = ('Unrecognized device. Please use a registered device '
                       'or register this device in your profile settings.')


class PinNotConfigured(AttendanceError):
    code = 'PIN_NOT_CONFIGURED'
    default_message = 'You need to set up a PIN in your profile settings first'


class InvalidPin(AttendanceError):
    code = 'INVALID_PIN'
    http_status = 401
    default_message = 'Invalid PIN'


class BiometricRequired(AttendanceError):
    code = 'BIOMETRIC_REQUIRED'
    http_status = 401
    default_message = 'Biometric verification is required'


class SelfieRequired(AttendanceError):
    code = 'SELFIE_REQUIRED'
    default_message = 'Selfie verification is required'


class InvalidState(AttendanceError):
    code = 'INVALID_STATE'
    http_status = 409
    default_message = 'Operation not allowed in the current session state'


class NotAuthorized(AttendanceError):
    code = 'NOT_AUTHORIZED'
    http_status = 403
    default_message = 'You do not have permission to perform this action'


class ValidationFailed(AttendanceError):
    code = 'VALIDATION_FAILED'
    default_message = 'Invalid request data'


class InternalError(AttendanceError):
    code = 'INTERNAL_ERROR'
    http_status = 500
    default_message = 'Internal server error'


def _format_meters(value: float):
    # 100.0 reads as "100m" in user feedback
    return int(value) if float(value).is_integer() else value
