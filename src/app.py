"""
Flask web application for Round Robin Pro.
"""
import os
import csv
import io

from flask import Flask, request, jsonify, Response
from roundrobin.models import Team
from roundrobin.tournament import Tournament
from roundrobin.store import TournamentStore, StoreError, InvalidTournamentError, TournamentNotFoundError

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

TOURNAMENTS_FILE = os.path.join(DATA_DIR, 'tournaments.yaml')
MAX_TEAMS = 10
MAX_COURTS = 10

app.logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())


def get_store() -> TournamentStore:
    """Return the store backing the current data directory."""
    return TournamentStore(TOURNAMENTS_FILE)


def _parse_team_names(raw) -> tuple:
    """Clean up submitted team names. Returns (names, error)."""
    if raw is None:
        return [], 'Missing teams'
    if isinstance(raw, str):
        raw = raw.splitlines()
    if not isinstance(raw, list):
        return [], 'Teams must be a list of names'
    names = [str(name).strip() for name in raw if name is not None and str(name).strip()]
    if len(names) < 2:
        return [], 'At least two teams are required.'
    if len(names) > MAX_TEAMS:
        return [], f'A tournament can have at most {MAX_TEAMS} teams.'
    seen = set()
    for name in names:
        if name.lower() in seen:
            return [], f'Duplicate team name: {name}'
        seen.add(name.lower())
    return names, None


def _parse_courts(raw) -> tuple:
    """Validate a court count. Returns (courts, error)."""
    try:
        courts = int(raw)
    except (TypeError, ValueError):
        return None, 'Courts must be a whole number'
    if courts < 1 or courts > MAX_COURTS:
        return None, f'Courts must be between 1 and {MAX_COURTS}'
    return courts, None


def _match_to_json(match) -> dict:
    data = match.to_dict()
    data['team1_name'] = match.team1.name
    data['team2_name'] = match.team2.name
    data['is_bye_match'] = match.is_bye_match
    data['description'] = match.describe()
    return data


def _tournament_summary(tournament) -> dict:
    return {
        'id': tournament.id,
        'title': tournament.title,
        'teams': len(tournament.active_teams),
        'available_courts': tournament.available_courts,
        'state': tournament.state.to_dict(),
    }


def _tournament_to_json(tournament) -> dict:
    data = _tournament_summary(tournament)
    data['teams'] = [team.to_dict() for team in tournament.active_teams]
    data['schedule'] = [_match_to_json(match) for match in tournament.schedule]
    return data


def _rebuild_roster(tournament, names):
    """Keep existing team entries for names that remain, create the rest."""
    existing = {team.name: team for team in tournament.active_teams}
    return [existing.get(name) or Team(name=name) for name in names]


@app.errorhandler(TournamentNotFoundError)
def handle_not_found(e):
    return jsonify({'error': str(e)}), 404


@app.errorhandler(InvalidTournamentError)
def handle_invalid(e):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(StoreError)
def handle_store_error(e):
    app.logger.warning(f'Storage error: {e}')
    return jsonify({'error': str(e)}), 500


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List all tournaments with their progress."""
    return jsonify({'tournaments': [_tournament_summary(t) for t in get_store().list()]})


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Create a tournament and generate its schedule."""
    data = request.get_json(silent=True) or {}

    title = (data.get('title') or '').strip()
    if not title:
        return jsonify({'error': 'Title cannot be empty'}), 400
    names, error = _parse_team_names(data.get('teams'))
    if error:
        return jsonify({'error': error}), 400
    courts, error = _parse_courts(data.get('available_courts', 1))
    if error:
        return jsonify({'error': error}), 400

    tournament = Tournament(title=title, teams=names, available_courts=courts)
    tournament.update_schedule()
    get_store().add(tournament)
    app.logger.info(f'Created tournament "{title}" with {len(names)} teams on {courts} courts')

    return jsonify(_tournament_to_json(tournament)), 201


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    """Return a tournament with its full schedule."""
    return jsonify(_tournament_to_json(get_store().get(tournament_id)))


@app.route('/api/tournaments/<tournament_id>', methods=['PUT'])
def api_update_tournament(tournament_id):
    """Edit title, teams or courts. Changing teams or courts regenerates the schedule."""
    data = request.get_json(silent=True) or {}

    title = None
    if 'title' in data:
        title = (data.get('title') or '').strip()
        if not title:
            return jsonify({'error': 'Title cannot be empty'}), 400
    names = None
    if 'teams' in data:
        names, error = _parse_team_names(data.get('teams'))
        if error:
            return jsonify({'error': error}), 400
    courts = None
    if 'available_courts' in data:
        courts, error = _parse_courts(data.get('available_courts'))
        if error:
            return jsonify({'error': error}), 400

    def change(tournament):
        if title is not None:
            tournament.title = title
        regenerate = False
        if names is not None and names != [team.name for team in tournament.active_teams]:
            tournament.teams = _rebuild_roster(tournament, names)
            regenerate = True
        if courts is not None and courts != tournament.available_courts:
            tournament.available_courts = courts
            regenerate = True
        if regenerate:
            tournament.update_schedule()
        return tournament, regenerate

    tournament, regenerated = get_store().modify(tournament_id, change)
    if regenerated:
        app.logger.info(f'Regenerated schedule for "{tournament.title}", previous scores discarded')

    result = _tournament_to_json(tournament)
    result['regenerated'] = regenerated
    return jsonify(result)


@app.route('/api/tournaments/<tournament_id>', methods=['DELETE'])
def api_delete_tournament(tournament_id):
    """Delete a tournament."""
    get_store().remove(tournament_id)
    return jsonify({'success': True})


@app.route('/api/tournaments/<tournament_id>/schedule', methods=['GET'])
def api_schedule(tournament_id):
    """Return the schedule grouped by round."""
    tournament = get_store().get(tournament_id)
    rounds = []
    for round_number, matches in tournament.matches_by_round().items():
        rounds.append({
            'round': round_number,
            'matches': [_match_to_json(m) for m in matches if not m.is_bye_match],
            'byes': [m.playing_team.name for m in matches if m.is_bye_match],
        })
    return jsonify({'id': tournament.id, 'title': tournament.title, 'rounds': rounds})


@app.route('/api/tournaments/<tournament_id>/schedule.csv', methods=['GET'])
def api_export_schedule_csv(tournament_id):
    """Export the schedule as a downloadable CSV file."""
    tournament = get_store().get(tournament_id)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(['Round', 'Court', 'Team 1', 'Team 2', 'Team 1 Score', 'Team 2 Score', 'Completed'])
    for match in tournament.schedule:
        if match.is_bye_match:
            writer.writerow([match.round, 'Bye', match.playing_team.name, '', '', '', ''])
            continue
        writer.writerow([
            match.round,
            match.court_number,
            match.team1.name,
            match.team2.name,
            match.team1_score if match.is_completed else '',
            match.team2_score if match.is_completed else '',
            'yes' if match.is_completed else 'no',
        ])

    csv_content = output.getvalue()
    output.close()

    return Response(
        csv_content,
        mimetype='text/csv',
        headers={'Content-Disposition': 'attachment; filename=schedule.csv'},
    )


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>', methods=['POST'])
def api_record_result(tournament_id, match_id):
    """Record the final score of a match."""
    data = request.get_json(silent=True) or {}
    score1 = data.get('team1_score')
    score2 = data.get('team2_score')
    if score1 is None or score2 is None:
        return jsonify({'error': 'Both scores must be filled'}), 400

    def change(tournament):
        try:
            return tournament.record_result(match_id, score1, score2), tournament.state
        except KeyError:
            return None, None

    try:
        match, state = get_store().modify(tournament_id, change)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    if match is None:
        return jsonify({'error': f'Match {match_id} not found'}), 404

    return jsonify({'success': True, 'match': _match_to_json(match), 'state': state.to_dict()})


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>', methods=['DELETE'])
def api_clear_result(tournament_id, match_id):
    """Clear the recorded score of a match."""
    def change(tournament):
        try:
            return tournament.clear_result(match_id), tournament.state
        except KeyError:
            return None, None

    match, state = get_store().modify(tournament_id, change)
    if match is None:
        return jsonify({'error': f'Match {match_id} not found'}), 404

    return jsonify({'success': True, 'match': _match_to_json(match), 'state': state.to_dict()})


@app.route('/api/tournaments/<tournament_id>/standings', methods=['GET'])
def api_standings(tournament_id):
    """Return the standings table, best record first."""
    tournament = get_store().get(tournament_id)
    winner = tournament.state.winner if tournament.is_completed else None
    return jsonify({
        'standings': [team.to_dict() for team in tournament.standings()],
        'winner': winner.name if winner else None,
        'state': tournament.state.to_dict(),
    })


@app.route('/api/test-data', methods=['POST'])
def api_load_test_data():
    """Load sample tournaments for development/testing."""
    samples = [
        ('Nationals 2025', ['Team Alpha', 'Team Bravo', 'Team Charlie', 'Team Delta'], 1),
        ('Regionals 2025', ['Team Echo', 'Team Foxtrot', 'Team Golf', 'Team Hotel', 'Team India'], 2),
    ]
    store = get_store()
    created = []
    for title, names, courts in samples:
        tournament = Tournament(title=title, teams=names, available_courts=courts)
        tournament.update_schedule()
        store.add(tournament)
        created.append(tournament.id)

    return jsonify({'success': True, 'tournaments': created})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
