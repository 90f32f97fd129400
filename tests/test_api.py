"""HTTP tests for the session, attendance and profile endpoints."""
import json
from datetime import timedelta

from qrattend import db, limiter
from qrattend.models.attendance import AttendanceRecord
from qrattend.models.class_session import ClassSession
from qrattend.models.course import CourseEnrollment
from qrattend.models.user import User, UserRole
from qrattend.utils.time_utils import utcnow

SESSION_BODY = {
    'date': '2026-10-18',
    'startTime': '2026-10-18T09:00:00Z',
    'endTime': '2026-10-18T10:30:00Z'
}

def create_session(client, headers, course, **extra):
    body = dict(SESSION_BODY, courseId=course.id, **extra)
    return client.post('/api/sessions', json=body, headers=headers)

def test_health_check(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert json.loads(response.data)['status'] == 'healthy'

def test_teacher_creates_session(client, auth_headers, teacher, course):
    response = create_session(client, auth_headers(teacher), course,
                              geofence={'latitude': 12.97, 'longitude': 77.59})

    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['error'] == False
    session = data['data']
    assert session['is_active'] is True
    assert session['token'].startswith('CS201-')
    assert session['qr_image'].startswith('data:image/png;base64,')
    assert session['expires_in'] == 120
    assert session['geofence'] == {'latitude': 12.97, 'longitude': 77.59, 'radius': 100.0}
    assert session['course']['code'] == 'CS201'

def test_session_creation_validation(client, auth_headers, teacher, course):
    response = client.post('/api/sessions', json={'courseId': course.id}, headers=auth_headers(teacher))
    assert response.status_code == 400

    response = create_session(client, auth_headers(teacher), course, startTime='not-a-date')
    assert response.status_code == 400
    assert json.loads(response.data)['code'] == 'VALIDATION_FAILED'

def test_teacher_cannot_use_foreign_course(client, auth_headers, other_teacher, course):
    response = create_session(client, auth_headers(other_teacher), course)
    assert response.status_code == 404

def test_student_cannot_create_session(client, auth_headers, student, course):
    response = create_session(client, auth_headers(student), course)
    assert response.status_code == 403

def test_missing_token_rejected(client, course):
    response = client.post('/api/sessions', json=SESSION_BODY)
    assert response.status_code == 401

def test_rotate_endpoint(client, auth_headers, teacher, course):
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']

    response = client.post(f"/api/sessions/{created['id']}/rotate", headers=auth_headers(teacher))
    assert response.status_code == 200
    rotated = json.loads(response.data)['data']
    assert rotated['token'] != created['token']

    response = client.post('/api/sessions/rotate', json={'sessionId': created['id']},
                           headers=auth_headers(teacher))
    assert response.status_code == 200
    assert json.loads(response.data)['data']['token'] != rotated['token']

def test_rotate_inactive_session_conflict(client, auth_headers, teacher, course):
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']
    client.patch(f"/api/sessions/{created['id']}", json={'active': False}, headers=auth_headers(teacher))

    response = client.post(f"/api/sessions/{created['id']}/refresh", headers=auth_headers(teacher))
    assert response.status_code == 409
    assert json.loads(response.data)['code'] == 'INVALID_STATE'

def test_patch_deactivates(client, auth_headers, teacher, course):
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']

    response = client.patch(f"/api/sessions/{created['id']}", json={'active': False},
                            headers=auth_headers(teacher))
    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['is_active'] is False
    assert data['end_time'] == '2026-10-18T10:30:00'

def test_other_teacher_cannot_see_session(client, auth_headers, teacher, other_teacher, course):
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']

    response = client.get(f"/api/sessions/{created['id']}", headers=auth_headers(other_teacher))
    assert response.status_code == 404

def test_students_do_not_see_tokens(client, auth_headers, teacher, student, course):
    create_session(client, auth_headers(teacher), course)

    response = client.get('/api/sessions', headers=auth_headers(student))
    sessions = json.loads(response.data)['data']
    assert len(sessions) == 1
    assert 'token' not in sessions[0]

def test_verify_token_endpoint(client, auth_headers, teacher, student, course):
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']

    response = client.get(f"/api/sessions/verify/{created['token']}", headers=auth_headers(student))
    assert response.status_code == 200
    assert json.loads(response.data)['data']['id'] == created['id']

    response = client.get('/api/sessions/verify/CS201-unknown-00', headers=auth_headers(student))
    assert response.status_code == 404
    assert json.loads(response.data)['code'] == 'SESSION_NOT_FOUND'

def test_check_in_flow(client, auth_headers, teacher, enrolled, course, profile_for):
    profile_for(enrolled, pin='2468', require_pin=True)
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']

    response = client.post('/api/attendance', headers=auth_headers(enrolled), json={
        'sessionId': created['id'],
        'token': created['token'],
        'pin': '2468',
        'deviceInfo': {'userAgent': 'pytest'}
    })
    assert response.status_code == 201
    record = json.loads(response.data)['data']
    assert record['verification_method'] == 'PIN'
    assert record['location_verified'] is False
    assert record['status'] == 'PRESENT'
    assert record['session']['course']['code'] == 'CS201'

    response = client.post('/api/attendance', headers=auth_headers(enrolled), json={
        'sessionId': created['id'],
        'pin': '2468'
    })
    assert response.status_code == 409
    assert json.loads(response.data)['code'] == 'ALREADY_MARKED'

def test_check_in_out_of_range(client, auth_headers, teacher, enrolled, course, profile_for):
    profile_for(enrolled)
    created = json.loads(create_session(
        client, auth_headers(teacher), course,
        geofence={'latitude': 12.97, 'longitude': 77.59, 'radius': 100}
    ).data)['data']

    response = client.post('/api/attendance', headers=auth_headers(enrolled), json={
        'sessionId': created['id'],
        'location': {'latitude': 12.98, 'longitude': 77.59}
    })
    assert response.status_code == 400
    data = json.loads(response.data)
    assert data['code'] == 'OUT_OF_RANGE'
    assert data['radius'] == 100
    assert data['distance'] == 1112
    assert 'within 100m' in data['message']

def test_check_in_expired_token(client, auth_headers, teacher, enrolled, course, profile_for):
    profile_for(enrolled)
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']
    session = db.session.get(ClassSession, created['id'])
    session.token_rotated_at = utcnow() - timedelta(minutes=3)
    db.session.commit()

    response = client.post('/api/attendance', headers=auth_headers(enrolled),
                           json={'sessionId': created['id']})
    assert response.status_code == 400
    assert json.loads(response.data)['code'] == 'TOKEN_EXPIRED'

def test_check_in_rejects_malformed_body(client, auth_headers, enrolled):
    response = client.post('/api/attendance', headers=auth_headers(enrolled),
                           json={'sessionId': 'abc'})
    assert response.status_code == 400
    assert json.loads(response.data)['code'] == 'VALIDATION_FAILED'

def test_teacher_marks_student_late(client, auth_headers, teacher, student, course, profile_for):
    profile_for(student)
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']

    response = client.post('/api/attendance/check-in', headers=auth_headers(teacher), json={
        'sessionId': created['id'],
        'studentId': student.id,
        'status': 'late'
    })
    assert response.status_code == 201
    assert json.loads(response.data)['data']['status'] == 'LATE'

def test_list_attendance_scoped_to_student(client, auth_headers, teacher, enrolled, course, profile_for):
    profile_for(enrolled)
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']
    client.post('/api/attendance', headers=auth_headers(enrolled), json={'sessionId': created['id']})

    response = client.get(f"/api/attendance?sessionId={created['id']}", headers=auth_headers(enrolled))
    records = json.loads(response.data)['data']
    assert len(records) == 1
    assert records[0]['student']['id'] == enrolled.id

    response = client.get('/api/attendance?limit=5', headers=auth_headers(teacher))
    assert len(json.loads(response.data)['data']) == 1

def test_internal_failure_is_opaque(client, auth_headers, teacher, enrolled, course, profile_for, monkeypatch):
    profile_for(enrolled)
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']

    def explode(record):
        raise RuntimeError('disk on fire')
    monkeypatch.setattr('qrattend.services.checkin_service.LedgerService.record', explode)

    response = client.post('/api/attendance', headers=auth_headers(enrolled),
                           json={'sessionId': created['id']})
    assert response.status_code == 500
    data = json.loads(response.data)
    assert data['code'] == 'INTERNAL_ERROR'
    assert 'disk' not in data['message']
    assert AttendanceRecord.query.count() == 0

def test_profile_endpoints(client, auth_headers, student):
    headers = auth_headers(student)

    response = client.get('/api/profile', headers=headers)
    assert response.status_code == 200
    profile = json.loads(response.data)['data']
    assert profile['security_preferences']['require_pin'] is True
    assert profile['has_pin'] is False

    response = client.post('/api/profile/pin', json={'pin': '12'}, headers=headers)
    assert response.status_code == 400

    response = client.post('/api/profile/pin', json={'pin': '1234'}, headers=headers)
    assert response.status_code == 200

    response = client.post('/api/profile/devices',
                           json={'deviceId': 'dev-1', 'deviceName': 'Pixel'}, headers=headers)
    assert response.status_code == 200
    devices = json.loads(response.data)['data']['devices']
    assert [d['device_id'] for d in devices] == ['dev-1']

    response = client.patch('/api/profile/security',
                            json={'securityPreferences': {'requireBiometric': False, 'requireSelfie': True}},
                            headers=headers)
    assert response.status_code == 200
    prefs = json.loads(response.data)['data']['security_preferences']
    assert prefs['require_biometric'] is False
    assert prefs['require_selfie'] is True
    assert prefs['require_pin'] is True

    response = client.get('/api/profile', headers=headers)
    profile = json.loads(response.data)['data']
    assert profile['has_pin'] is True
    assert 'pin_hash' not in profile

    response = client.delete('/api/profile/devices/dev-1', headers=headers)
    assert json.loads(response.data)['data']['devices'] == []

def test_profile_is_student_only(client, auth_headers, teacher):
    response = client.get('/api/profile', headers=auth_headers(teacher))
    assert response.status_code == 403

def test_check_in_limit_is_per_student(client, auth_headers, teacher, course, profile_for, monkeypatch):
    """A whole class behind one address is not throttled as a group."""
    monkeypatch.setattr(limiter, 'enabled', True)
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']

    students = []
    for number in range(35):
        student = User(email=f'student{number}@example.com', name=f'Student {number}',
                       role=UserRole.STUDENT).save()
        CourseEnrollment(student_id=student.id, course_id=course.id).save()
        profile_for(student)
        students.append(student)

    codes = [
        client.post('/api/attendance', headers=auth_headers(student),
                    json={'sessionId': created['id']}).status_code
        for student in students
    ]
    assert codes == [201] * 35

    # A single student hammering the endpoint is still limited
    repeat = [
        client.post('/api/attendance', headers=auth_headers(students[0]),
                    json={'sessionId': created['id']}).status_code
        for _ in range(30)
    ]
    assert repeat[:29] == [409] * 29
    assert repeat[29] == 429

def test_forwarded_for_header_is_not_trusted(client, auth_headers, teacher, enrolled, course, profile_for):
    profile_for(enrolled)
    created = json.loads(create_session(client, auth_headers(teacher), course).data)['data']

    headers = dict(auth_headers(enrolled), **{'X-Forwarded-For': '203.0.113.9'})
    response = client.post('/api/attendance', headers=headers, json={'sessionId': created['id']})
    assert response.status_code == 201

    record = AttendanceRecord.query.filter_by(student_id=enrolled.id).one()
    assert record.ip_address == '127.0.0.1'
