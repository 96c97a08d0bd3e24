"""
Tournament aggregate: roster, court count, generated schedule and derived state.
"""
import logging
import uuid
from collections import OrderedDict

from roundrobin.models import Team, Match
from roundrobin.scheduling import generate_schedule, resolve_roster

logger = logging.getLogger(__name__)


class TournamentState:
    SETUP = 'setup'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'

    def __init__(self, kind, completed_matches=0, total_matches=0, winner=None, standings=None):
        self.kind = kind
        self.completed_matches = completed_matches
        self.total_matches = total_matches
        self.winner = winner
        self.standings = standings if standings else []

    @classmethod
    def setup(cls):
        return cls(cls.SETUP)

    @classmethod
    def in_progress(cls, completed_matches, total_matches):
        return cls(cls.IN_PROGRESS, completed_matches=completed_matches, total_matches=total_matches)

    @classmethod
    def completed(cls, winner, standings):
        return cls(cls.COMPLETED, winner=winner, standings=standings)

    @property
    def is_completed(self):
        return self.kind == self.COMPLETED

    @property
    def progress(self):
        if self.kind == self.IN_PROGRESS:
            return self.completed_matches / self.total_matches if self.total_matches > 0 else 0.0
        if self.kind == self.COMPLETED:
            return 1.0
        return 0.0

    def to_dict(self) -> dict:
        data = {'kind': self.kind, 'progress': self.progress}
        if self.kind == self.IN_PROGRESS:
            data['completed_matches'] = self.completed_matches
            data['total_matches'] = self.total_matches
        elif self.kind == self.COMPLETED:
            data['winner'] = self.winner.name if self.winner else None
            data['standings'] = [team.to_dict() for team in self.standings]
        return data

    def _key(self):
        if self.kind == self.IN_PROGRESS:
            return (self.kind, self.completed_matches, self.total_matches)
        if self.kind == self.COMPLETED:
            winner_id = self.winner.id if self.winner else None
            return (self.kind, winner_id, tuple((t.id, t.wins, t.losses) for t in self.standings))
        return (self.kind,)

    def __eq__(self, other):
        if not isinstance(other, TournamentState):
            return NotImplemented
        return self._key() == other._key()

    def __repr__(self):
        return f"TournamentState(kind={self.kind}, progress={self.progress:.2f})"


class Tournament:
    def __init__(self, title, teams=None, available_courts=1, schedule=None, id=None):
        self.id = id if id else uuid.uuid4().hex
        self.title = title
        self.teams = [team if isinstance(team, Team) else Team(name=team) for team in (teams or [])]
        self.available_courts = available_courts
        self.schedule = schedule if schedule else []
        self.state = TournamentState.setup()
        if self.schedule:
            self.update_state()

    @property
    def available_courts(self):
        return self._available_courts

    @available_courts.setter
    def available_courts(self, value):
        self._available_courts = max(1, int(value))

    @property
    def active_teams(self):
        return [team for team in self.teams if not team.is_bye]

    @property
    def is_completed(self):
        return self.state.is_completed

    def update_schedule(self):
        """Regenerate the schedule from scratch; any recorded scores are discarded."""
        self.teams = resolve_roster(self.teams)
        self.schedule = generate_schedule(self.teams, self.available_courts)
        logger.info("Regenerated schedule for '%s': %d matches", self.title, len(self.schedule))
        self.update_state()

    def update_state(self):
        real_matches = [match for match in self.schedule if not match.is_bye_match]
        total = len(real_matches)
        completed = sum(1 for match in real_matches if match.is_completed)
        active_count = len(self.active_teams)
        expected = active_count * (active_count - 1) // 2

        if total == 0:
            self.state = TournamentState.setup()
        elif completed == total and completed == expected:
            standings = self.standings()
            self.state = TournamentState.completed(standings[0] if standings else None, standings)
        else:
            self.state = TournamentState.in_progress(completed, total)

    def standings(self):
        """Active teams ranked by wins, computed on copies of the roster entries."""
        table = OrderedDict((team.id, Team(team.name, id=team.id)) for team in self.active_teams)
        for match in self.schedule:
            if match.is_bye_match or not match.is_completed:
                continue
            winner = match.winner
            if winner is None:
                continue
            loser = match.team2 if winner is match.team1 else match.team1
            if winner.id in table:
                table[winner.id].wins += 1
            if loser.id in table:
                table[loser.id].losses += 1
        return sorted(table.values(), key=lambda team: team.wins, reverse=True)

    def find_match(self, match_id):
        for match in self.schedule:
            if match.id == match_id:
                return match
        return None

    def record_result(self, match_id, team1_score, team2_score):
        """Store a final score for a match and refresh the tournament state."""
        match = self.find_match(match_id)
        if match is None:
            raise KeyError(match_id)
        if match.is_bye_match:
            raise ValueError("Bye matches cannot be scored")
        if isinstance(team1_score, bool) or isinstance(team2_score, bool) \
                or not isinstance(team1_score, int) or not isinstance(team2_score, int):
            raise ValueError("Scores must be whole numbers")
        if team1_score < 0 or team2_score < 0:
            raise ValueError("Please enter valid scores for both teams")
        match.team1_score = team1_score
        match.team2_score = team2_score
        match.is_completed = True
        self.update_state()
        return match

    def clear_result(self, match_id):
        match = self.find_match(match_id)
        if match is None:
            raise KeyError(match_id)
        match.team1_score = 0
        match.team2_score = 0
        match.is_completed = False
        self.update_state()
        return match

    def matches_by_round(self):
        rounds = OrderedDict()
        for match in self.schedule:
            rounds.setdefault(match.round, []).append(match)
        return rounds

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'available_courts': self.available_courts,
            'teams': [team.to_dict() for team in self.teams],
            'schedule': [match.to_dict() for match in self.schedule],
        }

    @classmethod
    def from_dict(cls, data: dict):
        teams = [Team.from_dict(team) for team in data.get('teams') or []]
        teams_by_id = {team.id: team for team in teams}
        schedule = [Match.from_dict(match, teams_by_id) for match in data.get('schedule') or []]
        return cls(
            title=data.get('title', ''),
            teams=teams,
            available_courts=data.get('available_courts', 1),
            schedule=schedule,
            id=data.get('id'),
        )

    def __repr__(self):
        return f"Tournament(title={self.title}, teams={len(self.active_teams)}, courts={self.available_courts})"
