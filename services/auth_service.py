# services/auth_service.py

import re
import logging
from urllib.parse import quote
from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.orm import undefer
from werkzeug.security import generate_password_hash, check_password_hash
from db.extensions import db
from models.user import User
from services.exceptions import (
    Conflict, InvalidCredentials, NotFound, Unauthorized, ValidationError
)
from services.utils import commit_session, dispatch_email

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
PHONE_RE = re.compile(r'^[0-9]{10}$')
NAME_MIN, NAME_MAX = 2, 60
PASSWORD_MIN = 6
PROFILE_FIELDS = ('name', 'email', 'phone', 'address')
EMAIL_MAX = 255
DEFAULT_AVATAR_URL = 'https://avatar.iran.liara.run/username?username={}'


def normalize_email(email):
    return email.strip().lower() if isinstance(email, str) else ''


def default_avatar(name):
    return DEFAULT_AVATAR_URL.format(quote(name, safe=''))


def hash_password(password):
    return generate_password_hash(password, method=current_app.config.get('PASSWORD_HASH_METHOD', 'scrypt'))


def check_password_text(password):
    if not isinstance(password, str):
        raise ValidationError('invalid_password', 'Password must be text')


def _check_profile_fields(fields):
    """Field rules shared by registration and profile updates."""
    for key in PROFILE_FIELDS:
        if fields.get(key) is not None and not isinstance(fields[key], str):
            raise ValidationError(f'invalid_{key}', f'{key.capitalize()} must be text')
    if 'name' in fields:
        name = (fields['name'] or '').strip()
        if not NAME_MIN <= len(name) <= NAME_MAX:
            raise ValidationError('invalid_name', f'Name must be {NAME_MIN}-{NAME_MAX} characters')
    email = normalize_email(fields.get('email'))
    if 'email' in fields and (len(email) > EMAIL_MAX or not EMAIL_RE.match(email)):
        raise ValidationError('invalid_email', 'Invalid email format')
    if fields.get('phone') and not PHONE_RE.match(fields['phone'].strip()):
        raise ValidationError('invalid_phone', 'Invalid phone number')


class AuthService:

    @staticmethod
    def register(name, email, phone, password, address=None):
        if not name or not email or not password:
            raise ValidationError('missing_fields', 'Name, email & password required')

        phone = '' if phone is None else str(phone)
        _check_profile_fields({'name': name, 'email': email, 'phone': phone, 'address': address})
        check_password_text(password)
        if len(password) < PASSWORD_MIN:
            raise ValidationError('weak_password', f'Password must be at least {PASSWORD_MIN} characters')

        email = normalize_email(email)
        if User.query.filter_by(email=email).first() is not None:
            raise Conflict('User already exists')

        name = name.strip()
        user = User(
            name=name,
            email=email,
            phone=(phone or '').strip(),
            address=(address or '').strip(),
            avatar=default_avatar(name),
            password_hash=hash_password(password),
        )
        db.session.add(user)
        commit_session('register user')

        current_app.logger.info(f"✅ Registered user {user.id} ({user.email})")
        return user

    @staticmethod
    def login(email, password):
        """
        Return (token, user). Unknown email and wrong password fail the same way.
        """
        if not email or not password:
            raise ValidationError('missing_fields', 'Missing email or password')
        if not isinstance(email, str) or not isinstance(password, str):
            raise InvalidCredentials()

        user = User.query.options(undefer(User.password_hash))\
            .filter_by(email=normalize_email(email))\
            .first()

        if not user or not check_password_hash(user.password_hash, password):
            logger.info(f"Failed login for {normalize_email(email)}")
            raise InvalidCredentials()

        token = AuthService.issue_token(user.id)
        AuthService.send_login_notification(user)
        return token, user

    @staticmethod
    def send_login_notification(user):
        dispatch_email(
            to=user.email,
            subject='Login Successful - RapsPowerPlay',
            body=f"Welcome {user.name}! You have logged in successfully.",
            html=f"""
            <div>
                <h1>🎮 RapsPowerPlay</h1>
                <p>Welcome {user.name}! You have logged in successfully.</p>
            </div>
            """
        )

    @staticmethod
    def issue_token(user_id, expires_delta=None):
        if expires_delta is None:
            expires_delta = current_app.config['JWT_ACCESS_TOKEN_EXPIRES']
        return create_access_token(identity=str(user_id), expires_delta=expires_delta)

    @staticmethod
    def verify_token(token):
        """Return the user id embedded in ``token``."""
        if not token:
            raise Unauthorized()
        try:
            claims = decode_token(token)
            return int(claims['sub'])
        except (PyJWTError, JWTExtendedException, KeyError, ValueError) as e:
            logger.debug(f"Token rejected: {str(e)}")
            raise Unauthorized('Invalid or expired token')

    @staticmethod
    def get_user(user_id):
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFound('User not found')
        return user

    @staticmethod
    def list_users():
        return User.query.order_by(User.id).all()

    @staticmethod
    def user_exists(email):
        return User.query.filter_by(email=normalize_email(email)).first() is not None

    @staticmethod
    def update_profile(user_id, fields):
        """Apply name/email/phone/address from ``fields``; other keys are ignored."""
        updates = {key: str(fields[key]) for key in PROFILE_FIELDS if fields.get(key) is not None}
        _check_profile_fields(updates)

        user = AuthService.get_user(user_id)

        if 'email' in updates:
            updates['email'] = normalize_email(updates['email'])
            taken = User.query.filter(User.email == updates['email'], User.id != user.id).first()
            if taken is not None:
                raise Conflict('Email already in use')

        for key, value in updates.items():
            setattr(user, key, value.strip())
        commit_session('update user')

        current_app.logger.info(f"Updated profile for user {user.id}: {sorted(updates)}")
        return user

    @staticmethod
    def update_avatar_ref(user_id, ref):
        user = AuthService.get_user(user_id)
        user.avatar = ref
        commit_session('update avatar')
        current_app.logger.info(f"Updated avatar for user {user.id}")
        return user

    @staticmethod
    def set_password(user, new_password):
        """Hash and store a new password. The caller commits."""
        user.password_hash = hash_password(new_password)
