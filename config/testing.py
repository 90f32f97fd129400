"""Testing configuration."""
from datetime import timedelta

class TestingConfig:
    """Testing configuration class."""
    
    # Basic Flask config
    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    
    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    
    # JWT Configuration
    JWT_SECRET_KEY = 'test-jwt-secret-with-enough-length-for-hs256'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    
    CORS_ORIGINS = ["*"]
    PROXY_FIX_X_FOR = 0
    
    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'
    
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
    LOG_LEVEL = 'WARNING'
    LOG_FILE = None
