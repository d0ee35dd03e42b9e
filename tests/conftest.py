import json

import pytest

from app import create_app
from app.config import Config
from db.extensions import db as _db, mail
from services.auth_service import AuthService


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    MAIL_SUPPRESS_SEND = True
    MAIL_ASYNC = False
    MAIL_DEFAULT_SENDER = 'no-reply@raps.test'
    JWT_SECRET_KEY = 'test-secret-key-with-enough-length-for-hs256'
    PASSWORD_HASH_METHOD = 'pbkdf2:sha256:1000'
    CLOUDINARY_CLOUD_NAME = None
    CLOUDINARY_API_KEY = None
    CLOUDINARY_API_SECRET = None
    ENQUIRY_SPREADSHEET_ID = 'test-sheet'
    ENQUIRY_SHEET_NAME = 'Raps_Enquiries'


@pytest.fixture
def app(tmp_path):
    config = type('PerTestConfig', (TestConfig,), {'UPLOAD_FOLDER': str(tmp_path / 'Images')})
    app = create_app(config)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(app):
    with mail.record_messages() as messages:
        yield messages


@pytest.fixture
def user(app):
    return AuthService.register('Alice', 'a@x.com', '9999999999', 'secret1')


@pytest.fixture
def admin(app):
    staff = AuthService.register('Admin User', 'admin@x.com', '8888888888', 'adminpass')
    staff.is_admin = True
    _db.session.commit()
    return staff


def auth_header(user):
    return {'Authorization': f'Bearer {AuthService.issue_token(user.id)}'}


@pytest.fixture
def user_headers(user):
    return auth_header(user)


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin)


@pytest.fixture
def make_booking_payload():
    """Form-style booking request; keyword arguments override fields, None drops one."""
    def _make(**overrides):
        payload = {
            'selectedConsole': 'ps5',
            'rentalPeriod': 'hourly',
            'controllers': '2',
            'duration': '3',
            'isMember': 'false',
            'startAt': '2025-01-10T10:00:00Z',
            'endAt': '2025-01-10T13:00:00Z',
            'selectedGames': json.dumps(['FC 25', 'Tekken 8']),
            'contactInfo': json.dumps({
                'name': 'Ravi Kumar',
                'email': 'ravi@example.com',
                'phone': '9876543210',
                'address': '12 MG Road, Bengaluru',
            }),
        }
        for key, value in overrides.items():
            if value is None:
                payload.pop(key, None)
            else:
                payload[key] = value
        return payload
    return _make
