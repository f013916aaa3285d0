"""Party domain services: lifecycle, rounds, guesses and scoring.

This package holds the game rules and is imported by the HTTP routes,
keeping transport concerns separated from core party mechanics. Every
function expects to run inside a Flask application context.
"""

from .errors import (
    AlreadyStartedError,
    InvalidInputError,
    NoSongsError,
    NotFoundError,
    NotRevealedError,
    PartyError,
    StorageFailureError,
    UnauthorizedError,
)
from .guesses import get_user_guesses, submit_guess
from .lifecycle import (
    PartyState,
    SongInput,
    create_party,
    get_party_name,
    get_party_state,
    get_users,
    is_game_over,
    join_party,
    next_round,
    require_admin,
    start_competition,
    verify_admin,
)
from .rounds import assign_rounds, get_round_songs, get_total_songs, round_window
from .scoring import (
    LeaderboardEntry,
    SongResult,
    get_leaderboard,
    get_party_songs,
    get_round_results,
    identity_key,
)
