"""Great-circle distance and geofence checks."""
import math
from typing import Dict

EARTH_RADIUS_METERS = 6371000

class GeoService:
    """Service for location verification."""
    
    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate distance between two GPS points in meters (Haversine)."""
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)
        
        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        # Rounding can push a a hair outside [0, 1] near antipodes
        a = min(1.0, max(0.0, a))
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        
        return EARTH_RADIUS_METERS * c
    
    @staticmethod
    def verify_location(latitude: float, longitude: float, session) -> Dict:
        """Check a coordinate against the session's geofence."""
        distance = GeoService.calculate_distance(
            latitude, longitude,
            session.geofence_latitude, session.geofence_longitude
        )
        
        return {
            'is_inside': distance <= session.geofence_radius_meters,
            'distance': distance,
            'radius': session.geofence_radius_meters,
            'center': {
                'latitude': session.geofence_latitude,
                'longitude': session.geofence_longitude
            }
        }
