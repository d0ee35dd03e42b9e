# services/exceptions.py
"""
Errors raised by the service layer.

Controllers let these propagate; the app factory registers a handler that
turns them into JSON responses using ``status_code`` and ``to_dict()``.
"""


class ServiceError(Exception):
    status_code = 500
    kind = 'server_error'
    default_message = 'Server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {
            'success': False,
            'ok': False,
            'error': self.kind,
            'message': self.message,
        }


class ValidationError(ServiceError):
    """Bad, missing or out-of-range input. ``rule`` names the failed check."""
    status_code = 400
    kind = 'validation_error'
    default_message = 'Invalid request'

    def __init__(self, rule, message=None):
        self.rule = rule
        super().__init__(message)

    def to_dict(self):
        data = super().to_dict()
        data['rule'] = self.rule
        return data


class PasswordMismatch(ValidationError):
    def __init__(self, message='Passwords do not match'):
        super().__init__('password_mismatch', message)


class NotFound(ServiceError):
    status_code = 404
    kind = 'not_found'
    default_message = 'Not found'


class Conflict(ServiceError):
    status_code = 409
    kind = 'conflict'
    default_message = 'User already exists'


class InvalidCredentials(ServiceError):
    status_code = 401
    kind = 'invalid_credentials'
    default_message = 'Invalid credentials'


class Unauthorized(ServiceError):
    status_code = 401
    kind = 'unauthorized'
    default_message = 'Unauthorized'


class ExpiredOrInvalidCode(ServiceError):
    status_code = 400
    kind = 'invalid_code'
    default_message = 'Invalid OTP'


class InvalidCode(ExpiredOrInvalidCode):
    pass


class CodeExpired(ExpiredOrInvalidCode):
    kind = 'expired_code'
    default_message = 'OTP expired'


class StorageFailure(ServiceError):
    kind = 'storage_failure'
    default_message = 'Storage error'
