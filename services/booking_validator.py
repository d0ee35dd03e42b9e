# services/booking_validator.py

import json
import logging
from datetime import datetime, timezone

import pytz

from services.exceptions import ValidationError
from services.pricing import get_price

logger = logging.getLogger(__name__)

CONSOLES = ('ps5', 'ps4')
RENTAL_PERIODS = ('hourly', 'daily')
CONTACT_FIELDS = ('name', 'email', 'phone', 'address')
MAX_GAMES = 5
MIN_CONTROLLERS, MAX_CONTROLLERS = 1, 4
DEFAULT_TZ = 'Asia/Kolkata'
MEMBER_TRUE_VALUES = ('true', '1')


def _parse_json(value):
    """Return the decoded value of a JSON string, or the value itself if already decoded."""
    if value is None or value == '':
        return None
    if isinstance(value, (list, dict)):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return None


def parse_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_bool(value):
    return value is True or value in MEMBER_TRUE_VALUES


def parse_games(value):
    # A malformed games list must not block the booking
    games = _parse_json(value)
    if not isinstance(games, list):
        return []
    return [str(game) for game in games]


def parse_contact(value):
    contact = _parse_json(value)
    return contact if contact else None


def display_text(value):
    text = '' if value is None else str(value).strip()
    return text or None


def parse_instant(value, tz):
    """
    Parse an ISO-8601 instant into naive UTC.

    Naive input is read as wall-clock time in ``tz``.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    try:
        if moment.tzinfo is None:
            moment = tz.localize(moment)
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    except (OverflowError, ValueError):
        # Instants at the edge of the datetime range cannot be shifted
        return None


class BookingValidator:
    """
    Turns a raw booking request (form fields or JSON) into a normalized draft.

    Checks run in a fixed order and the first failure is raised as a
    ValidationError whose ``rule`` names the check.
    """

    @staticmethod
    def validate(payload):
        console = payload.get('selectedConsole')
        period = payload.get('rentalPeriod') or payload.get('planType')
        start_raw = payload.get('startAt')
        end_raw = payload.get('endAt')
        contact = parse_contact(payload.get('contactInfo'))
        games = parse_games(payload.get('selectedGames'))
        controllers = parse_int(payload.get('controllers'))
        duration = parse_int(payload.get('duration'))
        is_member = parse_bool(payload.get('isMember'))
        tz_name = payload.get('tz') or DEFAULT_TZ

        if not console or not period or not start_raw or not end_raw or not contact:
            raise ValidationError('missing_fields', 'Missing required fields.')

        if console not in CONSOLES:
            raise ValidationError('invalid_console', 'Invalid console.')

        if period not in RENTAL_PERIODS:
            raise ValidationError('invalid_period', 'Invalid rental period.')

        if controllers is None or not MIN_CONTROLLERS <= controllers <= MAX_CONTROLLERS:
            raise ValidationError('invalid_controllers', 'Invalid controllers (1-4).')

        if duration is None or duration < 1:
            raise ValidationError('invalid_duration', 'Invalid duration.')

        try:
            tz = pytz.timezone(tz_name)
        except (pytz.UnknownTimeZoneError, AttributeError):
            raise ValidationError('invalid_window', 'Invalid timezone.')

        start_at = parse_instant(start_raw, tz)
        end_at = parse_instant(end_raw, tz)
        if start_at is None or end_at is None:
            raise ValidationError('invalid_window', 'Invalid start or end time.')

        if end_at <= start_at:
            raise ValidationError('end_before_start', 'End must be after start.')

        if len(games) > MAX_GAMES:
            raise ValidationError('max_games', f'Max {MAX_GAMES} games allowed.')

        if not isinstance(contact, dict) or not all(
            isinstance(contact.get(field), str) and contact.get(field).strip()
            for field in CONTACT_FIELDS
        ):
            raise ValidationError('invalid_contact', 'Contact name, email, phone and address are required.')

        total = get_price(console, controllers, duration, period, is_member)
        if not total:
            raise ValidationError('invalid_pricing', 'Invalid pricing selection.')

        owner_id = parse_int(payload.get('BookingAdmin'))

        logger.debug(f"Booking request valid: {console}/{period} x{controllers} for {duration}, total={total}")

        return {
            'console': console,
            'games': games,
            'period': period,
            'controllers': controllers,
            'duration': duration,
            'is_member': is_member,
            'start_at': start_at,
            'end_at': end_at,
            'start_time': display_text(payload.get('startTime')),
            'end_time': display_text(payload.get('endTime')),
            'tz': tz_name,
            'contact': {field: contact[field].strip() for field in CONTACT_FIELDS},
            'owner_id': owner_id,
            'total': total,
        }
