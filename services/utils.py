# services/utils.py

import random
import logging
from threading import Thread
from datetime import datetime, timezone
from flask import current_app
from flask_mail import Message
from sqlalchemy.exc import SQLAlchemyError
from db.extensions import db, mail
from services.exceptions import StorageFailure

logger = logging.getLogger(__name__)

BOOKING_CODE_PREFIX = 'RP-'
# 32 characters, no 0/O/1/I
BOOKING_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
BOOKING_CODE_LENGTH = 6


def utcnow():
    """Naive UTC timestamp, the form every DateTime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_booking_code():
    """Short human-readable booking code, e.g. RP-7KQ2MX. Not unique by itself."""
    return BOOKING_CODE_PREFIX + ''.join(
        random.choice(BOOKING_CODE_ALPHABET) for _ in range(BOOKING_CODE_LENGTH)
    )


def send_async_email(app, msg):
    """Send email inside its own app context. Failures are logged, never raised."""
    with app.app_context():
        try:
            mail.send(msg)
            app.logger.info(f"✅ Email sent successfully to {msg.recipients}")
        except Exception as e:
            app.logger.error(f"❌ Failed to send email to {msg.recipients}: {str(e)}")


def dispatch_email(to, subject, body, html=None):
    """
    Best-effort email delivery.

    With MAIL_ASYNC enabled the message goes out on a daemon thread and this
    returns immediately. Either way a delivery failure never reaches the caller.
    """
    app = current_app._get_current_object()
    msg = Message(
        subject=subject,
        recipients=[to],
        sender=app.config.get('MAIL_DEFAULT_SENDER')
    )
    msg.body = body
    if html:
        msg.html = html

    if app.config.get('MAIL_ASYNC', True):
        Thread(target=send_async_email, args=(app, msg), daemon=True).start()
    else:
        send_async_email(app, msg)


def commit_session(action):
    """Commit the current session, rolling back and raising StorageFailure on a database error."""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"❌ Failed to {action}: {str(e)}", exc_info=True)
        raise StorageFailure(f'Failed to {action}')
