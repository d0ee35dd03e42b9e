import io
import logging
import os

from db.extensions import db
from models.booking import Booking
from services.booking_service import BookingService
from services.exceptions import StorageFailure


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.get_json()['ok'] is True


def test_create_booking_from_form(client, make_booking_payload):
    response = client.post('/api/bookings', data=make_booking_payload(total='1'))

    assert response.status_code == 201
    body = response.get_json()
    assert body['ok'] is True
    assert body['booking']['total'] == 520
    assert body['booking']['status'] == 'pending'
    assert body['booking']['booking_code'].startswith('RP-')


def test_create_booking_from_json(client, make_booking_payload):
    payload = make_booking_payload(controllers=1, duration=2, rentalPeriod='daily', isMember=True)
    response = client.post('/api/bookings', json=payload)

    assert response.status_code == 201
    assert response.get_json()['booking']['total'] == 1339


def test_create_booking_with_id_images(app, client, make_booking_payload):
    data = make_booking_payload()
    data['AdharImg'] = (io.BytesIO(b'front'), 'aadhaar.png')
    data['PersonWithAdharImg'] = (io.BytesIO(b'selfie'), 'selfie.jpg')

    response = client.post('/api/bookings', data=data, content_type='multipart/form-data')

    assert response.status_code == 201
    booking = response.get_json()['booking']
    assert booking['id_document_image'].startswith('Images/Aadhaar/AdharImg-')
    assert booking['id_document_image'].endswith('.png')
    assert booking['id_with_holder_image'].startswith('Images/Aadhaar/PersonWithAdharImg-')

    stored = os.path.join(app.config['UPLOAD_FOLDER'], 'Aadhaar', booking['id_document_image'].rsplit('/', 1)[1])
    with open(stored, 'rb') as fh:
        assert fh.read() == b'front'

    served = client.get('/' + booking['id_document_image'])
    assert served.status_code == 200
    assert served.data == b'front'


def test_non_image_upload_is_rejected(client, make_booking_payload):
    data = make_booking_payload()
    data['AdharImg'] = (io.BytesIO(b'%PDF'), 'aadhaar.pdf')

    response = client.post('/api/bookings', data=data, content_type='multipart/form-data')

    assert response.status_code == 400
    assert response.get_json()['rule'] == 'invalid_image'
    assert Booking.query.count() == 0


def test_invalid_pricing_scenario_b(client, make_booking_payload):
    response = client.post('/api/bookings', data=make_booking_payload(duration='8'))

    assert response.status_code == 400
    body = response.get_json()
    assert body['success'] is False
    assert body['rule'] == 'invalid_pricing'
    assert body['message'] == 'Invalid pricing selection.'
    assert Booking.query.count() == 0


def test_missing_fields(client):
    response = client.post('/api/bookings', data={'selectedConsole': 'ps5'})
    assert response.status_code == 400
    assert response.get_json()['rule'] == 'missing_fields'


def test_update_status_requires_admin(client, user_headers, make_booking_payload):
    booking_id = client.post('/api/bookings', data=make_booking_payload()).get_json()['booking']['id']

    anonymous = client.post(f'/api/UpdateStatus/{booking_id}', json={'status': 'confirmed'})
    customer = client.post(f'/api/UpdateStatus/{booking_id}', json={'status': 'confirmed'}, headers=user_headers)

    assert anonymous.status_code == 401
    assert customer.status_code == 401


def test_update_status_as_admin(client, admin_headers, make_booking_payload):
    booking_id = client.post('/api/bookings', data=make_booking_payload()).get_json()['booking']['id']

    response = client.post(f'/api/UpdateStatus/{booking_id}', json={'status': 'cancelled'}, headers=admin_headers)

    assert response.status_code == 200
    assert response.get_json()['booking']['status'] == 'cancelled'
    assert client.get(f'/api/GetBookingById/{booking_id}').get_json()['status'] == 'cancelled'


def test_update_status_invalid_value(client, admin_headers, make_booking_payload):
    booking_id = client.post('/api/bookings', data=make_booking_payload()).get_json()['booking']['id']
    response = client.post(f'/api/UpdateStatus/{booking_id}', json={'status': 'done'}, headers=admin_headers)
    assert response.status_code == 400


def test_update_status_unknown_booking(client, admin_headers):
    response = client.post('/api/UpdateStatus/999', json={'status': 'confirmed'}, headers=admin_headers)
    assert response.status_code == 404


def test_get_all_bookings(client, admin_headers, make_booking_payload):
    client.post('/api/bookings', data=make_booking_payload())
    client.post('/api/bookings', data=make_booking_payload(selectedConsole='ps4'))

    response = client.get('/api/GetAllBookings', headers=admin_headers)

    assert response.status_code == 200
    assert sorted(b['console'] for b in response.get_json()) == ['ps4', 'ps5']


def test_get_booking_by_id_not_found(client):
    response = client.get('/api/GetBookingById/12345')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'not_found'


def test_get_owner_booking(client, admin, make_booking_payload):
    client.post('/api/bookings', data=make_booking_payload(BookingAdmin=str(admin.id)))
    client.post('/api/bookings', data=make_booking_payload(BookingAdmin=str(admin.id)))

    first = client.get(f'/api/bookings/{admin.id}').get_json()
    second = client.get(f'/api/bookings/{admin.id}').get_json()

    assert len(first['booking']) == 1
    assert first['booking'][0]['owner_id'] == admin.id
    assert first == second


def test_get_owner_booking_none(client):
    body = client.get('/api/bookings/31').get_json()
    assert body == {'ok': True, 'booking': []}


def test_unknown_route(client):
    assert client.get('/api/nowhere').status_code == 404


def test_json_body_that_is_not_an_object(client):
    response = client.post('/api/bookings', json=[1, 2])
    assert response.status_code == 400
    assert response.get_json()['rule'] == 'missing_fields'


def test_booking_far_outside_datetime_range(client, make_booking_payload):
    payload = make_booking_payload(startAt='0001-01-01T00:00:00', endAt='0001-01-01T03:00:00')
    response = client.post('/api/bookings', data=payload)
    assert response.status_code == 400
    assert response.get_json()['rule'] == 'invalid_window'


def test_failed_insert_removes_uploaded_images(app, client, make_booking_payload, monkeypatch):
    def failing_create(draft, images=None):
        raise StorageFailure('Failed to store booking')
    monkeypatch.setattr(BookingService, 'create', staticmethod(failing_create))

    data = make_booking_payload()
    data['AdharImg'] = (io.BytesIO(b'front'), 'aadhaar.png')
    data['PersonWithAdharImg'] = (io.BytesIO(b'selfie'), 'selfie.jpg')
    response = client.post('/api/bookings', data=data, content_type='multipart/form-data')

    assert response.status_code == 500
    assert response.get_json()['error'] == 'storage_failure'
    assert os.listdir(os.path.join(app.config['UPLOAD_FOLDER'], 'Aadhaar')) == []


def test_admin_token_for_deleted_account(client, admin, admin_headers):
    db.session.delete(admin)
    db.session.commit()

    response = client.get('/api/GetAllBookings', headers=admin_headers)

    assert response.status_code == 401
    assert response.get_json()['message'] == 'Invalid or expired token'


def test_slow_requests_are_logged(app, client, caplog):
    app.config['SLOW_REQUEST_MS'] = -1
    with caplog.at_level(logging.WARNING):
        client.get('/api/health')
    assert any('SLOW REQUEST: GET /api/health' in record.getMessage() for record in caplog.records)


def test_fast_requests_are_not_logged(app, client, caplog):
    app.config['SLOW_REQUEST_MS'] = 60_000
    with caplog.at_level(logging.WARNING):
        client.get('/api/health')
    assert not any('SLOW REQUEST' in record.getMessage() for record in caplog.records)
