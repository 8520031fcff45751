from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Werewolf game server!'})

@main.route('/health')
def health():
    registry = current_app.extensions['werewolf']
    return jsonify({
        'status': 'ok',
        'message': 'Werewolf game server is running',
        'rooms': len(registry),
    })
