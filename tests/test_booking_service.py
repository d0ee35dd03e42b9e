import re
from datetime import datetime

import pytest
from sqlalchemy import Text

import services.booking_service as booking_service_module
from db.extensions import db
from models.booking import Booking
from services.booking_service import BookingService
from services.booking_validator import BookingValidator
from services.exceptions import NotFound, StorageFailure, ValidationError
from services.utils import BOOKING_CODE_ALPHABET, generate_booking_code


@pytest.fixture
def draft(make_booking_payload):
    return BookingValidator.validate(make_booking_payload())


def test_booking_code_format():
    for _ in range(200):
        code = generate_booking_code()
        assert re.fullmatch(r'RP-[A-HJ-NP-Z2-9]{6}', code)


def test_booking_code_alphabet_has_no_ambiguous_characters():
    assert len(BOOKING_CODE_ALPHABET) == 32
    assert len(set(BOOKING_CODE_ALPHABET)) == 32
    assert not set('0O1I') & set(BOOKING_CODE_ALPHABET)


def test_create_scenario_a(app, draft):
    booking = BookingService.create(draft)

    assert booking.id is not None
    assert booking.total == 520
    assert booking.status == 'pending'
    assert booking.code.startswith('RP-')
    assert booking.created_at is not None
    assert booking.games == ['FC 25', 'Tekken 8']
    assert booking.contact_email == 'ravi@example.com'


def test_create_stores_image_references(app, draft):
    booking = BookingService.create(draft, {'AdharImg': 'Images/Aadhaar/a.png'})
    assert booking.id_document_image == 'Images/Aadhaar/a.png'
    assert booking.id_with_holder_image is None


def test_create_retries_on_code_collision(app, draft, monkeypatch):
    codes = iter(['RP-AAAAAA', 'RP-AAAAAA', 'RP-BBBBBB'])
    monkeypatch.setattr(booking_service_module, 'generate_booking_code', lambda: next(codes))

    first = BookingService.create(draft)
    second = BookingService.create(dict(draft))

    assert first.code == 'RP-AAAAAA'
    assert second.code == 'RP-BBBBBB'


def test_create_gives_up_after_max_attempts(app, draft, monkeypatch):
    monkeypatch.setattr(booking_service_module, 'generate_booking_code', lambda: 'RP-AAAAAA')
    BookingService.create(draft)

    with pytest.raises(StorageFailure):
        BookingService.create(dict(draft))
    assert Booking.query.count() == 1


def test_update_status(app, draft):
    booking = BookingService.create(draft)

    updated = BookingService.update_status(booking.id, 'confirmed')

    assert updated.status == 'confirmed'
    assert updated.total == 520


def test_update_status_rejects_unknown_status(app, draft):
    booking = BookingService.create(draft)
    with pytest.raises(ValidationError) as exc:
        BookingService.update_status(booking.id, 'shipped')
    assert exc.value.rule == 'invalid_status'


def test_update_status_missing_booking(app):
    with pytest.raises(NotFound):
        BookingService.update_status(999, 'confirmed')


def test_get_by_id(app, draft):
    booking = BookingService.create(draft)
    assert BookingService.get_by_id(booking.id) is booking


def test_get_by_id_not_found(app):
    with pytest.raises(NotFound):
        BookingService.get_by_id(42)


def test_get_all(app, draft):
    BookingService.create(draft)
    BookingService.create(dict(draft))
    assert len(BookingService.get_all()) == 2


def test_get_by_owner_returns_single_first_match(app, draft):
    BookingService.create(dict(draft, owner_id=5))
    BookingService.create(dict(draft, owner_id=5))
    BookingService.create(dict(draft, owner_id=6))

    result = BookingService.get_by_owner(5)
    again = BookingService.get_by_owner(5)

    assert result is not None
    assert result.owner_id == 5
    assert again.id == result.id


def test_get_by_owner_without_bookings(app):
    assert BookingService.get_by_owner(77) is None


def test_total_is_not_recomputed(app, draft):
    booking = BookingService.create(draft)
    booking.duration = 6
    db.session.commit()
    assert BookingService.get_by_id(booking.id).total == 520


def test_to_dict(app, draft):
    data = BookingService.create(draft).to_dict()
    assert data['contact'] == {
        'name': 'Ravi Kumar',
        'email': 'ravi@example.com',
        'phone': '9876543210',
        'address': '12 MG Road, Bengaluru',
    }
    assert data['start_at'] == datetime(2025, 1, 10, 10, 0).isoformat() + 'Z'
    assert data['status'] == 'pending'


@pytest.mark.parametrize('column', [
    'start_time', 'end_time', 'contact_name', 'contact_email', 'contact_phone', 'contact_address',
])
def test_free_text_columns_are_unbounded(column):
    assert isinstance(Booking.__table__.c[column].type, Text)


def test_long_contact_details_are_stored(app, make_booking_payload):
    address = 'Flat 4B, ' + 'Long Residency Road, ' * 40 + 'Bengaluru'
    payload = make_booking_payload(startTime='Friday 10 January, 10:00 AM')
    draft = BookingValidator.validate(payload)
    draft['contact']['address'] = address

    booking = BookingService.create(draft)

    db.session.expire_all()
    stored = db.session.get(Booking, booking.id)
    assert stored.contact_address == address
    assert stored.start_time == 'Friday 10 January, 10:00 AM'
