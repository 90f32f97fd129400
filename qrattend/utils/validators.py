"""Request parsing and validation for the attendance API."""
from datetime import date, datetime
from typing import Any, Dict, Optional

from qrattend.errors import ValidationFailed
from qrattend.models.attendance import AttendanceStatus
from qrattend.services.verification_service import CheckInProofs, Coordinates

class Validator:
    """Validation helper class.

    Request bodies accept camelCase keys with snake_case fallbacks.
    Absent keys and explicit nulls both mean "not supplied".
    """
    
    @staticmethod
    def get(data: Dict, *keys: str, default: Any = None) -> Any:
        for key in keys:
            if key in data and data[key] is not None:
                return data[key]
        return default
    
    @staticmethod
    def require_json(data: Any) -> Dict:
        if not isinstance(data, dict):
            raise ValidationFailed("Request body must be JSON")
        return data
    
    @staticmethod
    def parse_int(value: Any, field: str) -> Optional[int]:
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValidationFailed(f"{field} must be an integer")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationFailed(f"{field} must be an integer")
    
    @staticmethod
    def parse_bool(value: Any, field: str) -> Optional[bool]:
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ('true', 'false'):
            return value.lower() == 'true'
        raise ValidationFailed(f"{field} must be true or false")
    
    @staticmethod
    def parse_float(value: Any, field: str) -> float:
        if isinstance(value, bool):
            raise ValidationFailed(f"{field} must be a number")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValidationFailed(f"{field} must be a number")
    
    @staticmethod
    def parse_datetime(value: Any, field: str) -> Optional[datetime]:
        """Parse an ISO-8601 timestamp into naive UTC."""
        if value is None:
            return None
        try:
            parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        except ValueError:
            raise ValidationFailed(f"Invalid {field} format")
        if parsed.tzinfo is not None:
            parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)
        return parsed
    
    @staticmethod
    def parse_date(value: Any, field: str) -> Optional[date]:
        if value is None:
            return None
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            raise ValidationFailed(f"Invalid {field} format")
    
    @classmethod
    def parse_coordinates(cls, value: Any) -> Optional[Coordinates]:
        if value is None:
            return None
        if not isinstance(value, dict):
            raise ValidationFailed("Location must be an object with latitude and longitude")
        
        latitude = cls.get(value, 'latitude', 'lat')
        longitude = cls.get(value, 'longitude', 'lon', 'lng')
        if latitude is None or longitude is None:
            return None
        
        latitude = cls.parse_float(latitude, 'latitude')
        longitude = cls.parse_float(longitude, 'longitude')
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise ValidationFailed("Coordinates out of range")
        return Coordinates(latitude=latitude, longitude=longitude)
    
    @classmethod
    def parse_geofence(cls, value: Any, default_radius: float) -> Optional[Dict]:
        if value is None:
            return None
        coordinates = cls.parse_coordinates(value)
        if coordinates is None:
            raise ValidationFailed("Geofence requires latitude and longitude")
        
        radius = cls.get(value, 'radius', 'radiusMeters', 'radius_meters', default=default_radius)
        radius = cls.parse_float(radius, 'radius')
        if radius <= 0:
            raise ValidationFailed("Geofence radius must be positive")
        
        return {
            'latitude': coordinates.latitude,
            'longitude': coordinates.longitude,
            'radius': radius
        }
    
    @staticmethod
    def parse_status(value: Any) -> Optional[AttendanceStatus]:
        if value is None:
            return None
        try:
            return AttendanceStatus(str(value).upper())
        except ValueError:
            raise ValidationFailed("Status must be one of PRESENT, LATE, ABSENT")
    
    @classmethod
    def parse_proofs(cls, data: Dict) -> CheckInProofs:
        """Map a loosely typed check-in body onto explicit proofs."""
        pin = cls.get(data, 'pin')
        if pin is not None and not isinstance(pin, str):
            pin = str(pin)
        
        device_info = cls.get(data, 'deviceInfo', 'device_info')
        if device_info is not None and not isinstance(device_info, dict):
            raise ValidationFailed("deviceInfo must be an object")
        
        device_id = cls.get(data, 'deviceId', 'device_id')
        selfie = cls.get(data, 'selfieImage', 'selfie_image')
        
        return CheckInProofs(
            pin=pin,
            biometric_verified=cls.parse_bool(
                cls.get(data, 'biometricVerified', 'biometric_verified'), 'biometricVerified'),
            selfie_image=str(selfie) if selfie is not None else None,
            device_id=str(device_id) if device_id is not None else None,
            coordinates=cls.parse_coordinates(cls.get(data, 'location', 'coordinates')),
            device_info=device_info
        )
