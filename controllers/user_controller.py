# controllers/user_controller.py

from flask import Blueprint, request, jsonify, current_app
from controllers.guards import token_required, token_user, admin_required, self_or_admin_required
from services.auth_service import AuthService
from services.image_storage import ImageStorageService
from services.otp_service import OTPService
from services.exceptions import ServiceError, ValidationError

user_bp = Blueprint('user', __name__)


def _body():
    data = request.get_json(silent=True)
    # Anything but a JSON object falls back to the (possibly empty) form
    return data if isinstance(data, dict) else request.form


@user_bp.route('/UserExistOrNot/<email>', methods=['GET'])
def user_exist_or_not(email):
    return jsonify({'success': True, 'exists': AuthService.user_exists(email)}), 200


@user_bp.route('/GetAllUser', methods=['GET'])
@admin_required
def get_all_users():
    return jsonify([u.to_dict() for u in AuthService.list_users()]), 200


@user_bp.route('/register', methods=['POST'])
def register():
    data = _body()
    user = AuthService.register(
        name=data.get('name'),
        email=data.get('email'),
        phone=data.get('phone'),
        password=data.get('password'),
        address=data.get('address'),
    )
    token = AuthService.issue_token(user.id)
    return jsonify({'ok': True, 'success': True, 'token': token, 'user': user.to_dict()}), 201


@user_bp.route('/login', methods=['POST'])
def login():
    data = _body()
    token, user = AuthService.login(data.get('email'), data.get('password'))
    return jsonify({'ok': True, 'success': True, 'token': token, 'user': user.to_dict()}), 200


@user_bp.route('/update_user/<int:user_id>', methods=['POST'])
@self_or_admin_required
def update_user(user_id):
    user = AuthService.update_profile(user_id, _body())
    return jsonify({'success': True, 'user': user.to_dict()}), 200


@user_bp.route('/update_user_dp/<int:user_id>', methods=['POST'])
@self_or_admin_required
def update_user_dp(user_id):
    file = request.files.get('DP')
    if not file or not file.filename:
        raise ValidationError('missing_file', 'No file uploaded')

    # Fail on an unknown user before anything is written to storage
    AuthService.get_user(user_id)
    ref = ImageStorageService.save_avatar(file)
    try:
        user = AuthService.update_avatar_ref(user_id, ref)
    except ServiceError:
        ImageStorageService.discard([ref])
        raise
    return jsonify({'success': True, 'DP': user.avatar}), 200


@user_bp.route('/SendForgotPassEmail/<email>', methods=['POST'])
def send_forgot_pass_email(email):
    OTPService.request_reset(email)
    return jsonify({'success': True, 'message': 'OTP sent to your registered email address'}), 200


@user_bp.route('/ResetUserPass', methods=['POST'])
def reset_user_pass():
    data = _body()
    OTPService.redeem_reset(
        email=data.get('email'),
        otp=data.get('otp'),
        new_password=data.get('NewPassword'),
        confirm_password=data.get('ConfirmPass'),
    )
    current_app.logger.info(f"Password reset completed for {data.get('email')}")
    return jsonify({'success': True, 'message': 'Password reset successfully'}), 200


@user_bp.route('/me', methods=['GET'])
@token_required
def me():
    user = token_user()
    return jsonify({'ok': True, 'user': user.to_dict()}), 200
