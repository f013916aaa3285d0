from flask import Blueprint, jsonify, request
from wrapped.services.party import (
    InvalidInputError,
    NoSongsError,
    NotFoundError,
    NotRevealedError,
    PartyError,
    SongInput,
    StorageFailureError,
    UnauthorizedError,
    create_party,
    get_leaderboard,
    get_party_name,
    get_party_songs,
    get_party_state,
    get_round_results,
    get_round_songs,
    get_total_songs,
    get_user_guesses,
    get_users,
    is_game_over,
    join_party,
    next_round,
    require_admin,
    start_competition,
    submit_guess,
)


parties = Blueprint('parties', __name__)

_STATUS_CODES = {
    NotFoundError: 404,
    InvalidInputError: 400,
    NoSongsError: 400,
    NotRevealedError: 403,
    UnauthorizedError: 401,
    StorageFailureError: 500,
}


@parties.errorhandler(PartyError)
def handle_party_error(exc):
    status = next((code for kind, code in _STATUS_CODES.items() if isinstance(exc, kind)), 500)
    return jsonify({'error': str(exc), 'kind': type(exc).__name__}), status


def _int_arg(value, name, default=None):
    if value is None or value == '':
        if default is None:
            raise InvalidInputError(f'{name} is required')
        return default
    # JSON true/2.5 must not pass as 1/2
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise InvalidInputError(f'{name} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f'{name} must be an integer')


def _state_payload(party_id):
    state = get_party_state(party_id)
    return {
        'id': party_id,
        'name': get_party_name(party_id),
        'started': state.started,
        'current_round': state.current_round,
        'show_results': state.show_results,
        'game_over': is_game_over(party_id),
        'total_songs': get_total_songs(party_id),
    }


@parties.route('', methods=['POST'])
def create_party_route():
    data = request.get_json(silent=True) or {}
    spr = data.get('songs_per_round')
    songs_per_round = _int_arg(spr, 'songs_per_round') if spr is not None else None
    party_id, admin_token = create_party(data.get('name'), songs_per_round)
    return jsonify({'id': party_id, 'admin_token': admin_token}), 201


@parties.route('/<string:party_id>/join', methods=['POST'])
def join_party_route(party_id):
    data = request.get_json(silent=True) or {}
    songs = data.get('songs')
    if not isinstance(songs, list):
        raise InvalidInputError('songs must be a list')
    user = join_party(party_id, data.get('name'), [SongInput.from_dict(s) for s in songs])
    return jsonify(user.to_dict()), 201


@parties.route('/<string:party_id>/users', methods=['GET'])
def get_users_route(party_id):
    return jsonify([u.to_dict() for u in get_users(party_id)])


@parties.route('/<string:party_id>/state', methods=['GET'])
def get_state_route(party_id):
    return jsonify(_state_payload(party_id))


@parties.route('/<string:party_id>/start', methods=['POST'])
def start_route(party_id):
    data = request.get_json(silent=True) or {}
    require_admin(party_id, data.get('admin_token'))
    start_competition(party_id)
    return jsonify(_state_payload(party_id))


@parties.route('/<string:party_id>/next', methods=['POST'])
def next_round_route(party_id):
    data = request.get_json(silent=True) or {}
    require_admin(party_id, data.get('admin_token'))
    next_round(party_id)
    return jsonify(_state_payload(party_id))


@parties.route('/<string:party_id>/round', methods=['GET'])
def current_round_route(party_id):
    state = get_party_state(party_id)
    if not state.started:
        raise InvalidInputError('Competition not started')
    songs = get_round_songs(party_id, state.current_round)
    return jsonify({'round': state.current_round, 'songs': [s.to_dict() for s in songs]})


@parties.route('/<string:party_id>/results', methods=['GET'])
def round_results_route(party_id):
    round_number = _int_arg(request.args.get('round'), 'round')
    return jsonify([r.to_dict() for r in get_round_results(party_id, round_number)])


@parties.route('/<string:party_id>/songs', methods=['GET'])
def party_songs_route(party_id):
    # Full owner list: admin at any time, everyone once the game is over
    if not is_game_over(party_id):
        require_admin(party_id, request.args.get('admin_token'))
    return jsonify([r.to_dict() for r in get_party_songs(party_id)])


@parties.route('/<string:party_id>/guess', methods=['POST'])
def submit_guess_route(party_id):
    data = request.get_json(silent=True) or {}
    submit_guess(
        _int_arg(data.get('guesser_id'), 'guesser_id'),
        _int_arg(data.get('song_id'), 'song_id'),
        _int_arg(data.get('guessed_user_id'), 'guessed_user_id'),
    )
    return jsonify({'message': 'Guess submitted'})


@parties.route('/<string:party_id>/guesses', methods=['GET'])
def user_guesses_route(party_id):
    user_name = request.args.get('user', '')
    guesses = get_user_guesses(party_id, user_name)
    return jsonify({str(song_id): name for song_id, name in guesses.items()})


@parties.route('/<string:party_id>/leaderboard', methods=['GET'])
def leaderboard_route(party_id):
    round_number = _int_arg(request.args.get('round'), 'round', default=0)
    return jsonify([e.to_dict() for e in get_leaderboard(party_id, round_number)])
