"""Development configuration."""
import os
from datetime import timedelta

class DevelopmentConfig:
    """Development configuration class."""
    
    # Basic Flask config
    DEBUG = True
    TESTING = False
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL', 'sqlite:///qrattend_dev.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    
    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt-secret-key-change-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    
    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Reverse proxy hops trusted for X-Forwarded-For (0 = none)
    PROXY_FIX_X_FOR = int(os.getenv('PROXY_FIX_X_FOR', '0'))
    
    # Rate Limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'memory://')
    RATELIMIT_DEFAULT = "1000 per hour"
    
    # QR tokens
    QR_TOKEN_FRESHNESS_SECONDS = 120
    QR_TOKEN_MAX_RETRIES = 5
    
    # Check-in policy
    DEFAULT_GEOFENCE_RADIUS_METERS = 100
    PIN_MIN_LENGTH = 4
    
    # Pagination
    DEFAULT_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 500
    
    # Logging
    LOG_LEVEL = 'DEBUG'
    LOG_FILE = 'logs/qrattend.log'
