from flask import Blueprint, current_app, jsonify

stats = Blueprint('stats', __name__)


def _matchmaker():
    return current_app.extensions['matchmaker']


@stats.route('', methods=['GET'])
@stats.route('/', methods=['GET'])
def get_stats():
    """
    Returns live gauges and cumulative counters for the admin dashboard.
    """
    return jsonify(_matchmaker().snapshot())


@stats.route('/reports/<string:participant_id>', methods=['GET'])
def get_report_count(participant_id):
    """
    Returns how many times a connected participant has been reported.
    """
    count = _matchmaker().report_count(participant_id)
    if count is None:
        return jsonify({'error': 'Participant not found'}), 404
    return jsonify({'participant_id': participant_id, 'report_count': count})
