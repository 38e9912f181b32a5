from flask import Blueprint, jsonify, current_app
from kiosk.services.match.registry import get_registry

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Elite Games kiosk server!'})

@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'live_matches': len(get_registry(current_app))})
