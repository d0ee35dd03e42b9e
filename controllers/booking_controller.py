# controllers/booking_controller.py

from flask import Blueprint, request, jsonify, current_app
from controllers.guards import admin_required
from services.booking_service import BookingService
from services.booking_validator import BookingValidator
from services.image_storage import ImageStorageService
from services.exceptions import ServiceError

booking_bp = Blueprint('booking', __name__)


def _booking_payload():
    """Form fields for multipart submissions, JSON object body otherwise."""
    if request.form:
        return request.form
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@booking_bp.route('/bookings', methods=['POST'])
def create_booking():
    current_app.logger.debug("Received booking request")

    # Any client-side total is ignored; the validator prices the booking
    draft = BookingValidator.validate(_booking_payload())
    images = ImageStorageService.save_id_images(request.files)
    try:
        booking = BookingService.create(draft, images)
    except ServiceError:
        ImageStorageService.discard(images.values())
        raise

    return jsonify({'ok': True, 'booking': booking.to_dict()}), 201


@booking_bp.route('/UpdateStatus/<int:booking_id>', methods=['POST'])
@admin_required
def update_status(booking_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    booking = BookingService.update_status(booking_id, data.get('status'))
    return jsonify({'success': True, 'booking': booking.to_dict()}), 200


@booking_bp.route('/GetAllBookings', methods=['GET'])
@admin_required
def get_all_bookings():
    bookings = BookingService.get_all()
    return jsonify([b.to_dict() for b in bookings]), 200


@booking_bp.route('/GetBookingById/<int:booking_id>', methods=['GET'])
def get_booking_by_id(booking_id):
    booking = BookingService.get_by_id(booking_id)
    return jsonify(booking.to_dict()), 200


@booking_bp.route('/bookings/<int:owner_id>', methods=['GET'])
def get_owner_booking(owner_id):
    # Zero or one booking, kept as a list for existing clients
    booking = BookingService.get_by_owner(owner_id)
    return jsonify({'ok': True, 'booking': [booking.to_dict()] if booking else []}), 200
