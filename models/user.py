# models/user.py
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.orm import deferred
from db.extensions import db
from services.utils import utcnow


class User(db.Model):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    name = Column(String(60), nullable=False)
    # Always stored lower-cased and trimmed
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=False, default='')
    address = Column(Text, nullable=False, default='')
    avatar = Column(Text, nullable=False, default='')
    is_admin = Column(Boolean, nullable=False, default=False)

    # Not loaded unless asked for with undefer()
    password_hash = deferred(Column(String(255), nullable=False))

    # Password reset
    reset_otp = Column(String(6), nullable=False, default='')
    reset_otp_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'dp': self.avatar,
            'is_admin': self.is_admin,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
