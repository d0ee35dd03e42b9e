# services/otp_service.py

import random
import string
import logging
from datetime import timedelta
from flask import current_app
from sqlalchemy.orm import undefer
from models.user import User
from services.auth_service import AuthService, check_password_text, normalize_email
from services.exceptions import NotFound, InvalidCode, CodeExpired, PasswordMismatch, ValidationError
from services.utils import commit_session, dispatch_email, utcnow

logger = logging.getLogger(__name__)


class OTPService:
    OTP_EXPIRY_SECONDS = 300  # 5 minutes
    OTP_LENGTH = 6

    @staticmethod
    def generate_otp(length=OTP_LENGTH):
        """Generate a random numeric OTP"""
        return ''.join(random.choices(string.digits, k=length))

    @staticmethod
    def request_reset(email):
        """
        Issue a password-reset OTP for ``email``.

        A new request always replaces a pending code. The code is committed
        before the mail is handed off, so it stays valid even if delivery fails.
        """
        user = User.query.filter_by(email=normalize_email(email)).first()
        if not user:
            logger.warning(f"⚠️  Reset requested for unknown email {normalize_email(email)}")
            raise NotFound('User not found')

        otp = OTPService.generate_otp()
        user.reset_otp = otp
        user.reset_otp_expires_at = utcnow() + timedelta(seconds=OTPService.OTP_EXPIRY_SECONDS)
        commit_session('store reset code')

        minutes = OTPService.OTP_EXPIRY_SECONDS // 60
        dispatch_email(
            to=user.email,
            subject='Reset Password OTP',
            body=f"Your OTP is {otp}. Valid for {minutes} minutes.",
            html=f"""
            <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
                <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                    <h1 style="color: #2563eb; margin: 0;">🎮 RapsPowerPlay</h1>
                    <p>Hello <strong>{user.name}</strong>,</p>
                    <p>Use the code below to reset your password:</p>
                    <h1 style="font-size: 42px; letter-spacing: 8px;">{otp}</h1>
                    <p>This OTP is valid for <strong>{minutes} minutes only</strong>. Never share it with anyone.</p>
                    <p style="font-size: 12px; color: #64748b;">If you didn't request a reset, please ignore this email.</p>
                </div>
            </body>
            </html>
            """
        )

        current_app.logger.info(f"✅ Reset OTP issued for user {user.id}")
        return user

    @staticmethod
    def redeem_reset(email, otp, new_password, confirm_password):
        """Check the OTP and set the new password. Clears the OTP on success."""
        user = User.query.options(undefer(User.password_hash))\
            .filter_by(email=normalize_email(email))\
            .first()
        if not user:
            raise NotFound('User not found')

        if not user.reset_otp or user.reset_otp != str(otp or '').strip():
            logger.warning(f"⚠️  Invalid OTP for user {user.id}")
            raise InvalidCode('Invalid OTP')

        if user.reset_otp_expires_at is None or user.reset_otp_expires_at < utcnow():
            logger.warning(f"⚠️  Expired OTP for user {user.id}")
            raise CodeExpired('OTP expired')

        if new_password != confirm_password:
            raise PasswordMismatch()

        if not new_password:
            raise ValidationError('missing_fields', 'New password required')
        check_password_text(new_password)

        AuthService.set_password(user, new_password)
        user.reset_otp = ''
        user.reset_otp_expires_at = None
        commit_session('reset password')

        current_app.logger.info(f"🔑 Password reset for user {user.id}")
        return user
