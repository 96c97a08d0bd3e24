"""
YAML-backed persistence for tournaments.

All reads and writes go through a FileLock beside the data file so that two
requests editing (and regenerating) the same tournament are serialized.
"""
import logging
import os

import yaml
from filelock import FileLock

from roundrobin.tournament import Tournament

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for tournament storage errors."""


class InvalidTournamentError(StoreError):
    def __init__(self, reason):
        super().__init__(f"Invalid tournament: {reason}")
        self.reason = reason


class TournamentNotFoundError(StoreError):
    def __init__(self, tournament_id):
        super().__init__(f"Tournament with ID {tournament_id} not found")
        self.tournament_id = tournament_id


def validate_tournament(tournament):
    """Court counts are not checked here: Tournament clamps them to at least 1."""
    if not tournament.title or not tournament.title.strip():
        raise InvalidTournamentError("Title cannot be empty")
    if len(tournament.active_teams) < 2:
        raise InvalidTournamentError("Tournament must have at least 2 teams")


class TournamentStore:
    def __init__(self, path, lock_timeout=10):
        self.path = path
        self.lock = FileLock(path + '.lock', timeout=lock_timeout)
        self.tournaments = []

    def _read(self):
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Failed to load tournaments data: {e}") from e
        if not data:
            return []
        if not isinstance(data, dict):
            raise StoreError("Failed to load tournaments data: expected a mapping at the top level")
        items = data.get('tournaments') or []
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise StoreError("Failed to load tournaments data: 'tournaments' must be a list of mappings")
        try:
            return [Tournament.from_dict(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Failed to load tournaments data: {e}") from e

    def _write(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + '.tmp'
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump({'tournaments': [t.to_dict() for t in self.tournaments]},
                               f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreError(f"Failed to save tournaments data: {e}") from e
        logger.debug("Saved %d tournaments to %s", len(self.tournaments), self.path)

    def load(self):
        with self.lock:
            self.tournaments = self._read()
        return self.tournaments

    def list(self):
        return list(self.load())

    def get(self, tournament_id):
        for tournament in self.load():
            if tournament.id == tournament_id:
                return tournament
        raise TournamentNotFoundError(tournament_id)

    def add(self, tournament):
        validate_tournament(tournament)
        with self.lock:
            self.tournaments = self._read()
            self.tournaments.append(tournament)
            self._write()
        logger.info("Added tournament '%s' (%s)", tournament.title, tournament.id)
        return tournament

    def update(self, tournament):
        validate_tournament(tournament)
        with self.lock:
            self.tournaments = self._read()
            for index, existing in enumerate(self.tournaments):
                if existing.id == tournament.id:
                    self.tournaments[index] = tournament
                    break
            else:
                raise TournamentNotFoundError(tournament.id)
            self._write()
        return tournament

    def modify(self, tournament_id, change):
        """Load a tournament, apply change(tournament) and save, all under one lock."""
        with self.lock:
            self.tournaments = self._read()
            for tournament in self.tournaments:
                if tournament.id == tournament_id:
                    break
            else:
                raise TournamentNotFoundError(tournament_id)
            result = change(tournament)
            validate_tournament(tournament)
            self._write()
        return result

    def remove(self, tournament_id):
        with self.lock:
            self.tournaments = self._read()
            if not any(t.id == tournament_id for t in self.tournaments):
                raise TournamentNotFoundError(tournament_id)
            self.tournaments = [t for t in self.tournaments if t.id != tournament_id]
            self._write()
        logger.info("Removed tournament %s", tournament_id)

    def remove_all(self):
        with self.lock:
            self.tournaments = []
            self._write()
