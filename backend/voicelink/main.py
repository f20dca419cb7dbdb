from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the VoiceLink matchmaking server!'})

@main.route('/health')
def health():
    matchmaker = current_app.extensions['matchmaker']
    return jsonify({'status': 'ok', 'online': matchmaker.snapshot()['online']})
