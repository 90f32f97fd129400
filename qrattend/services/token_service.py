"""Rotating session token generation and QR rendering."""
import base64
import io
import re
import secrets
import time

import qrcode

class TokenService:
    """Service for QR token operations."""
    
    RANDOM_BYTES = 8
    
    _last_timestamp = 0
    
    @staticmethod
    def _course_prefix(course_code: str) -> str:
        # Keep the token safe for URL path segments
        prefix = re.sub(r'[^A-Za-z0-9]', '', course_code or '').upper()
        return prefix or 'COURSE'
    
    @staticmethod
    def _to_base36(number: int) -> str:
        digits = '0123456789abcdefghijklmnopqrstuvwxyz'
        if number == 0:
            return '0'
        result = ''
        while number:
            number, remainder = divmod(number, 36)
            result = digits[remainder] + result
        return result
    
    @classmethod
    def _next_timestamp(cls) -> int:
        """Millisecond timestamp, strictly increasing within the process."""
        now = int(time.time() * 1000)
        if now <= cls._last_timestamp:
            now = cls._last_timestamp + 1
        cls._last_timestamp = now
        return now
    
    @classmethod
    def new_token(cls, course_code: str) -> str:
        """
        Generate a new opaque token for a course session.
        Format: <COURSECODE>-<base36 millis>-<random hex>
        """
        timestamp = cls._to_base36(cls._next_timestamp())
        random_part = secrets.token_hex(cls.RANDOM_BYTES)
        return f"{cls._course_prefix(course_code)}-{timestamp}-{random_part}"
    
    @staticmethod
    def generate_qr_image(token: str) -> str:
        """Render the token as a base64 PNG data URI."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(token)
        qr.make(fit=True)
        
        img = qr.make_image(fill_color="black", back_color="white")
        
        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()
        
        return f"data:image/png;base64,{img_str}"
