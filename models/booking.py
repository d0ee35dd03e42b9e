# models/booking.py
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from db.extensions import db
from services.utils import utcnow

BOOKING_STATUSES = ('pending', 'confirmed', 'cancelled')


class Booking(db.Model):
    __tablename__ = 'bookings'

    id = Column(Integer, primary_key=True)
    code = Column(String(12), unique=True, nullable=False, index=True)

    # users.id of the staff/admin account that entered the booking, no FK
    owner_id = Column(Integer, nullable=True, index=True)

    # Selections
    console = Column(db.Enum('ps5', 'ps4', name='console_type_enum'), nullable=False)
    games = Column(JSON, nullable=False, default=list)

    # Plan
    period = Column(db.Enum('hourly', 'daily', name='rental_period_enum'), nullable=False)
    controllers = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=False)
    is_member = Column(Boolean, nullable=False, default=False)

    # Schedule, stored as naive UTC. start_time/end_time are display strings only
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    start_time = Column(Text, nullable=True)
    end_time = Column(Text, nullable=True)
    tz = Column(String(64), nullable=False, default='Asia/Kolkata')

    # Contact
    contact_name = Column(Text, nullable=False)
    contact_email = Column(Text, nullable=False)
    contact_phone = Column(Text, nullable=False)
    contact_address = Column(Text, nullable=False)

    # ID images (stored file references)
    id_document_image = Column(Text, nullable=True)
    id_with_holder_image = Column(Text, nullable=True)

    # Pricing snapshot, never recomputed
    total = Column(Integer, nullable=False)

    status = Column(db.Enum(*BOOKING_STATUSES, name='booking_status_enum'), nullable=False, default='pending')

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Booking code={self.code} console={self.console} status={self.status}>"

    def to_dict(self):
        return {
            'id': self.id,
            'booking_code': self.code,
            'owner_id': self.owner_id,
            'console': self.console,
            'games': list(self.games or []),
            'period': self.period,
            'controllers': self.controllers,
            'duration': self.duration,
            'is_member': self.is_member,
            'start_at': self.start_at.isoformat() + 'Z' if self.start_at else None,
            'end_at': self.end_at.isoformat() + 'Z' if self.end_at else None,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'tz': self.tz,
            'contact': {
                'name': self.contact_name,
                'email': self.contact_email,
                'phone': self.contact_phone,
                'address': self.contact_address,
            },
            'id_document_image': self.id_document_image,
            'id_with_holder_image': self.id_with_holder_image,
            'total': self.total,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
