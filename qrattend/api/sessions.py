"""Class session API endpoints."""
from flask import Blueprint, current_app, g, request
from qrattend import db, limiter
from qrattend.errors import SessionNotFound
from qrattend.models.course import Course
from qrattend.services.session_service import SessionService
from qrattend.services.token_service import TokenService
from qrattend.utils.decorators import login_required, teacher_required
from qrattend.utils.helpers import error_response, success_response
from qrattend.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)

def _token_payload(session):
    return {
        'token': session.token,
        'qr_image': TokenService.generate_qr_image(session.token),
        'rotated_at': session.token_rotated_at.isoformat(),
        'expires_in': int(SessionService.freshness_window().total_seconds())
    }

def _get_visible_session(session_id):
    session = SessionService.get_session(session_id)
    user = g.current_user
    # Teachers can only access their own sessions
    if user.is_teacher() and session.teacher_id != user.id:
        raise SessionNotFound("Session not found or you do not have permission")
    return session

@sessions_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Session service is running')

@sessions_bp.route('', methods=['POST'])
@teacher_required
def create_session():
    """Open a new class session for one of the teacher's courses."""
    data = Validator.require_json(request.get_json(silent=True))
    teacher = g.current_user

    course_id = Validator.parse_int(Validator.get(data, 'courseId', 'course_id'), 'courseId')
    start_time = Validator.parse_datetime(Validator.get(data, 'startTime', 'start_time'), 'start time')
    if course_id is None or start_time is None:
        return error_response("courseId and startTime are required", 400, code='VALIDATION_FAILED')

    session_date = Validator.parse_date(Validator.get(data, 'date'), 'date') or start_time.date()
    end_time = Validator.parse_datetime(Validator.get(data, 'endTime', 'end_time'), 'end time')
    if end_time is not None and end_time < start_time:
        return error_response("End time must be after start time", 400, code='VALIDATION_FAILED')

    geofence = Validator.parse_geofence(
        Validator.get(data, 'geofence', 'location'),
        current_app.config.get('DEFAULT_GEOFENCE_RADIUS_METERS', 100)
    )

    course = db.session.get(Course, course_id)
    if course is None or not course.is_owned_by(teacher.id):
        return error_response("Course not found or you do not have permission", 404)

    session = SessionService.create_session(
        course=course,
        teacher=teacher,
        session_date=session_date,
        start_time=start_time,
        end_time=end_time,
        geofence=geofence
    )

    data = session.to_dict()
    data.update(_token_payload(session))
    return success_response(data=data, message="Session created successfully", status_code=201)

@sessions_bp.route('', methods=['GET'])
@login_required
def list_sessions():
    """List sessions; teachers only see their own."""
    active = Validator.parse_bool(request.args.get('active'), 'active')
    course_id = Validator.parse_int(
        request.args.get('courseId', request.args.get('course_id')), 'courseId')

    sessions = SessionService.list_sessions(g.current_user, active=active, course_id=course_id)
    include_token = g.current_user.is_teacher()
    return success_response(data=[s.to_dict(include_token=include_token) for s in sessions])

@sessions_bp.route('/<int:session_id>', methods=['GET'])
@login_required
def get_session(session_id):
    session = _get_visible_session(session_id)
    return success_response(data=session.to_dict(include_token=g.current_user.is_teacher()))

@sessions_bp.route('/verify/<string:token>', methods=['GET'])
@login_required
def verify_token(token):
    """Resolve a scanned QR token to its session."""
    session = SessionService.resolve_token(token)
    data = session.to_dict(include_token=False)
    data['teacher'] = {'id': session.teacher.id, 'name': session.teacher.name}
    data['token_fresh'] = session.is_token_fresh(SessionService.freshness_window())
    return success_response(data=data, message="QR code is valid")

@sessions_bp.route('/<int:session_id>', methods=['PATCH'])
@teacher_required
def update_session(session_id):
    """Update a session (e.g. deactivate it)."""
    data = Validator.require_json(request.get_json(silent=True))
    session = _get_visible_session(session_id)

    session = SessionService.update(
        session,
        g.current_user,
        active=Validator.parse_bool(Validator.get(data, 'active', 'isActive', 'is_active'), 'active'),
        end_time=Validator.parse_datetime(Validator.get(data, 'endTime', 'end_time'), 'end time')
    )
    return success_response(data=session.to_dict(), message="Session updated successfully")

@sessions_bp.route('/rotate', methods=['POST'])
@sessions_bp.route('/<int:session_id>/rotate', methods=['POST'])
@sessions_bp.route('/<int:session_id>/refresh', methods=['POST'])
@teacher_required
@limiter.limit("120 per minute")
def rotate_token(session_id=None):
    """Issue a new QR token for the session."""
    if session_id is None:
        data = Validator.require_json(request.get_json(silent=True))
        session_id = Validator.parse_int(Validator.get(data, 'sessionId', 'session_id'), 'sessionId')
        if session_id is None:
            return error_response("sessionId is required", 400, code='VALIDATION_FAILED')
    session = _get_visible_session(session_id)
    SessionService.rotate(session)
    return success_response(data=_token_payload(session), message="QR code refreshed")
