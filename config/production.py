"""Production configuration."""
import os
from datetime import timedelta

class ProductionConfig:
    """Production configuration class."""
    
    # Basic Flask config
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv('SECRET_KEY')  # Must be set in production
    
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    
    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    
    # CORS
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'https://*.vercel.app').split(',')

    # Reverse proxy hops trusted for X-Forwarded-For (0 = none)
    PROXY_FIX_X_FOR = int(os.getenv('PROXY_FIX_X_FOR', '1'))
    
    # Rate Limiting (Redis required in production)
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL')
    RATELIMIT_DEFAULT = "600/hour"
    
    # QR tokens
    QR_TOKEN_FRESHNESS_SECONDS = 120
    QR_TOKEN_MAX_RETRIES = 5
    
    # Check-in policy
    DEFAULT_GEOFENCE_RADIUS_METERS = 100
    PIN_MIN_LENGTH = 4
    
    # Pagination
    DEFAULT_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 200
    
    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = os.getenv('LOG_FILE', '/app/logs/qrattend.log')
