"""Custom decorators for authorization."""
from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from qrattend import db
from qrattend.models.user import User, UserRole
from qrattend.utils.helpers import error_response

def _load_current_user():
    verify_jwt_in_request()
    try:
        user_id = int(get_jwt_identity())
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)

def login_required(f):
    """Decorator to require any authenticated user; sets ``g.current_user``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()
        
        if not user:
            return error_response("User not found", 404)
        
        g.current_user = user
        return f(*args, **kwargs)
    return decorated_function

def teacher_required(f):
    """Decorator to require teacher role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()
        
        if not user:
            return error_response("User not found", 404)
        
        if user.role != UserRole.TEACHER:
            return error_response("Teacher access required", 403)
        
        g.current_user = user
        return f(*args, **kwargs)
    return decorated_function

def student_required(f):
    """Decorator to require student role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()
        
        if not user:
            return error_response("User not found", 404)
        
        if user.role != UserRole.STUDENT:
            return error_response("Student access required", 403)
        
        g.current_user = user
        return f(*args, **kwargs)
    return decorated_function
