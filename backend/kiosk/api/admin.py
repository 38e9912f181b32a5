from flask import Blueprint, jsonify, request, current_app
from kiosk import bcrypt
from kiosk.services.match.registry import get_registry
from kiosk.socketio_events import end_session


admin = Blueprint('admin', __name__)


@admin.route('/reset', methods=['POST'])
def reset_system():
    """Discard every live match after checking the shared staff passphrase."""
    data = request.get_json(silent=True) or {}
    passphrase = data.get('passphrase')
    if not isinstance(passphrase, str) or not passphrase:
        return jsonify({'error': 'Passphrase is required'}), 403
    if not bcrypt.check_password_hash(current_app.config['ADMIN_RESET_HASH'], passphrase):
        current_app.logger.warning("[admin-reset] rejected passphrase")
        return jsonify({'error': 'Invalid passphrase'}), 403

    registry = get_registry(current_app)
    session_ids = registry.session_ids()
    for session_id in session_ids:
        end_session(current_app._get_current_object(), session_id)
    current_app.logger.info(f"[admin-reset] discarded={len(session_ids)}")
    return jsonify({'reset': True, 'discarded': len(session_ids)})
