# services/booking_service.py

import logging
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from db.extensions import db
from models.booking import Booking, BOOKING_STATUSES
from services.exceptions import NotFound, StorageFailure, ValidationError
from services.utils import generate_booking_code

logger = logging.getLogger(__name__)


class BookingService:
    MAX_CODE_ATTEMPTS = 5

    @staticmethod
    def create(draft, images=None):
        """
        Persist a validated booking draft with a fresh booking code.

        A code already present in the store, or a unique-constraint violation
        on insert, triggers a new code. After MAX_CODE_ATTEMPTS the booking is
        not stored and StorageFailure is raised.
        """
        images = images or {}
        contact = draft['contact']

        for attempt in range(1, BookingService.MAX_CODE_ATTEMPTS + 1):
            code = generate_booking_code()
            try:
                if Booking.query.filter_by(code=code).first() is not None:
                    logger.warning(f"⚠️  Booking code collision on {code} (attempt {attempt})")
                    continue

                booking = Booking(
                    code=code,
                    owner_id=draft.get('owner_id'),
                    console=draft['console'],
                    games=list(draft['games']),
                    period=draft['period'],
                    controllers=draft['controllers'],
                    duration=draft['duration'],
                    is_member=draft['is_member'],
                    start_at=draft['start_at'],
                    end_at=draft['end_at'],
                    start_time=draft.get('start_time'),
                    end_time=draft.get('end_time'),
                    tz=draft['tz'],
                    contact_name=contact['name'],
                    contact_email=contact['email'],
                    contact_phone=contact['phone'],
                    contact_address=contact['address'],
                    id_document_image=images.get('AdharImg'),
                    id_with_holder_image=images.get('PersonWithAdharImg'),
                    total=draft['total'],
                    status='pending',
                )
                db.session.add(booking)
                db.session.commit()
                current_app.logger.info(f"✅ Booking {booking.code} created (id={booking.id}, total={booking.total})")
                return booking

            except IntegrityError as e:
                db.session.rollback()
                logger.warning(f"⚠️  Insert rejected for booking code {code} (attempt {attempt}): {str(e)}")
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error(f"❌ Failed to store booking: {str(e)}", exc_info=True)
                raise StorageFailure('Failed to store booking')

        logger.error(f"❌ No free booking code after {BookingService.MAX_CODE_ATTEMPTS} attempts")
        raise StorageFailure('Could not allocate a booking code')

    @staticmethod
    def update_status(booking_id, status):
        if status not in BOOKING_STATUSES:
            raise ValidationError('invalid_status', f"Status must be one of: {', '.join(BOOKING_STATUSES)}")

        booking = BookingService.get_by_id(booking_id)
        try:
            booking.status = status
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"❌ Failed to update booking {booking_id}: {str(e)}", exc_info=True)
            raise StorageFailure('Failed to update booking status')

        current_app.logger.info(f"Booking {booking.code} status -> {status}")
        return booking

    @staticmethod
    def get_all():
        try:
            return Booking.query.all()
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load bookings: {str(e)}", exc_info=True)
            raise StorageFailure('Failed to load bookings')

    @staticmethod
    def get_by_id(booking_id):
        try:
            booking = db.session.get(Booking, booking_id)
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load booking {booking_id}: {str(e)}", exc_info=True)
            raise StorageFailure('Failed to load booking')
        if booking is None:
            raise NotFound('Booking not found')
        return booking

    @staticmethod
    def get_by_owner(owner_id):
        """First booking entered by this account, in storage order. None if there is none."""
        try:
            return Booking.query.filter_by(owner_id=owner_id).first()
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load bookings for owner {owner_id}: {str(e)}", exc_info=True)
            raise StorageFailure('Failed to load bookings')
