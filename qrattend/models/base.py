"""Base model class with common functionality."""
from datetime import datetime, date, time
from enum import Enum
from typing import Dict, Any
from qrattend import db
from qrattend.utils.time_utils import utcnow

class BaseModel(db.Model):
    """Base model class with common fields and methods."""
    
    __abstract__ = True
    
    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    
    def save(self) -> 'BaseModel':
        """Save instance to database."""
        db.session.add(self)
        db.session.commit()
        return self
    
    def to_dict(self, exclude: list = None) -> Dict[str, Any]:
        """Convert instance to dictionary."""
        exclude = exclude or []
        result = {}
        
        for column in self.__table__.columns:
            key = column.name
            if key not in exclude:
                value = getattr(self, key)
                if isinstance(value, (datetime, date, time)):
                    value = value.isoformat()
                elif isinstance(value, Enum):
                    value = value.value
                result[key] = value
        
        return result
    
    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.id}>'
