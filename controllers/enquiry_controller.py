# controllers/enquiry_controller.py

from flask import Blueprint, request, jsonify, current_app
from services.sheets_service import SheetsService

enquiry_bp = Blueprint('enquiry', __name__)


@enquiry_bp.route('/enquiry', methods=['POST'])
def create_enquiry():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form.to_dict()
    try:
        SheetsService.append_enquiry(data)
    except Exception as e:
        current_app.logger.error(f"❌ Sheets Error: {str(e)}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500
    return jsonify({'success': True}), 200
