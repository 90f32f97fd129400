"""Configuration package for the QR Attendance service."""
import os
from typing import Optional, Type

from .development import DevelopmentConfig
from .production import ProductionConfig
from .testing import TestingConfig

CONFIGS = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}

def get_config(config_name: Optional[str] = None) -> Type:
    """
    Resolve a config class by name.

    Without a name, ``QRATTEND_ENV`` and then ``FLASK_ENV`` are consulted.
    Unknown names fall back to development.
    """
    name = config_name or os.getenv('QRATTEND_ENV') or os.getenv('FLASK_ENV')
    return CONFIGS.get(name, DevelopmentConfig)
