"""Helper functions for the application."""
from flask import jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_limiter.util import get_remote_address
from typing import Any

def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    return jsonify({
        'error': True,
        'message': str(error),
        'status_code': status_code
    }), status_code

def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }
    
    if data is not None:
        response['data'] = data
    
    return jsonify(response), status_code

def error_response(message: str, status_code: int = 400, code: str = None, **extra):
    """Return consistent error response."""
    response = {
        'error': True,
        'message': message,
        'status_code': status_code
    }
    
    if code:
        response['code'] = code
    response.update(extra)
    
    return jsonify(response), status_code

def client_ip() -> str:
    """Caller address; trusted proxy hops are unwrapped by ProxyFix."""
    return request.remote_addr

def rate_limit_key() -> str:
    """Rate-limit bucket: the JWT identity, else the caller address."""
    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    if identity is not None:
        return f'user:{identity}'
    return get_remote_address()
