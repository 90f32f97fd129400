"""Attendance API endpoints: check-in and ledger reads."""
from flask import Blueprint, g, request
from qrattend import limiter
from qrattend.services.checkin_service import CheckInService
from qrattend.services.ledger_service import LedgerService
from qrattend.utils.decorators import login_required
from qrattend.utils.helpers import client_ip, success_response
from qrattend.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('', methods=['POST'])
@attendance_bp.route('/check-in', methods=['POST'])
@login_required
@limiter.limit("30 per minute")
def check_in():
    """Mark attendance against a session's current QR token."""
    data = Validator.require_json(request.get_json(silent=True))

    record = CheckInService.check_in(
        actor=g.current_user,
        proofs=Validator.parse_proofs(data),
        session_id=Validator.parse_int(Validator.get(data, 'sessionId', 'session_id'), 'sessionId'),
        token=Validator.get(data, 'token', 'qrCode', 'qr_code'),
        student_id=Validator.parse_int(Validator.get(data, 'studentId', 'student_id'), 'studentId'),
        status=Validator.parse_status(Validator.get(data, 'status')),
        ip_address=client_ip()
    )

    return success_response(
        data=CheckInService.describe(record),
        message="Attendance marked successfully",
        status_code=201
    )

@attendance_bp.route('', methods=['GET'])
@login_required
def list_records():
    """Recent attendance records visible to the caller."""
    args = request.args
    records = LedgerService.list_records(
        viewer=g.current_user,
        session_id=Validator.parse_int(args.get('sessionId', args.get('session_id')), 'sessionId'),
        course_id=Validator.parse_int(args.get('courseId', args.get('course_id')), 'courseId'),
        student_id=Validator.parse_int(args.get('studentId', args.get('student_id')), 'studentId'),
        limit=Validator.parse_int(args.get('limit'), 'limit')
    )
    return success_response(data=[record.to_dict() for record in records])
