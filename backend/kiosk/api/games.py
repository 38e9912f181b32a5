from flask import Blueprint, jsonify
from kiosk.models import Game


games = Blueprint('games', __name__)


@games.route('', methods=['GET'])
def list_games():
    return jsonify([g.to_dict() for g in Game.query.order_by(Game.name).all()])


@games.route('/<string:game_id>', methods=['GET'])
def get_game(game_id):
    game = Game.query.filter_by(id=game_id).first()
    if not game:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(game.to_dict())
