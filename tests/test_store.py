"""
Tests for YAML tournament persistence.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from roundrobin.tournament import Tournament
from roundrobin.store import (
    TournamentStore,
    StoreError,
    InvalidTournamentError,
    TournamentNotFoundError,
)


@pytest.fixture
def store(tmp_path):
    return TournamentStore(str(tmp_path / "tournaments.yaml"))


def _tournament(title="Nationals", teams=("Team A", "Team B", "Team C"), courts=1):
    t = Tournament(title=title, teams=list(teams), available_courts=courts)
    t.update_schedule()
    return t


class TestLoadSave:

    def test_missing_file_loads_empty(self, store):
        assert store.load() == []

    def test_empty_file_loads_empty(self, store):
        open(store.path, 'w').close()
        assert store.load() == []

    def test_add_and_reload(self, store, tmp_path):
        t = _tournament()
        store.add(t)

        reloaded = TournamentStore(str(tmp_path / "tournaments.yaml")).get(t.id)
        assert reloaded.title == "Nationals"
        assert len(reloaded.schedule) == len(t.schedule)
        assert sum(1 for team in reloaded.teams if team.is_bye) == 1

    def test_file_is_plain_yaml(self, store):
        store.add(_tournament())
        with open(store.path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        assert data['tournaments'][0]['title'] == "Nationals"
        assert not os.path.exists(store.path + '.tmp')

    def test_corrupt_file_raises(self, store):
        with open(store.path, 'w', encoding='utf-8') as f:
            f.write("tournaments: [\n  - {title: ")
        with pytest.raises(StoreError):
            store.load()

    @pytest.mark.parametrize("content", [
        "- a\n- b\n",
        "tournaments:\n- just a string\n",
        "tournaments: not a list\n",
        "just a string\n",
    ])
    def test_unexpected_yaml_shape_raises(self, store, content):
        with open(store.path, 'w', encoding='utf-8') as f:
            f.write(content)
        with pytest.raises(StoreError, match="Failed to load"):
            store.load()

    def test_dangling_team_reference_raises(self, store):
        with open(store.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump({'tournaments': [{
                'id': 'x', 'title': 'Broken', 'available_courts': 1,
                'teams': [{'id': 'a', 'name': 'A'}],
                'schedule': [{'id': 'm', 'team1': 'a', 'team2': 'missing'}],
            }]}, f)
        with pytest.raises(StoreError):
            store.load()


class TestValidation:

    def test_empty_title_rejected(self, store):
        with pytest.raises(InvalidTournamentError, match="Title"):
            store.add(_tournament(title=""))

    def test_single_team_rejected(self, store):
        with pytest.raises(InvalidTournamentError, match="2 teams"):
            store.add(_tournament(teams=["Team A"]))

    def test_zero_courts_clamped_before_saving(self, store):
        t = _tournament(courts=0)
        store.add(t)
        assert store.get(t.id).available_courts == 1

    def test_bye_does_not_count_as_team(self, store):
        t = _tournament(teams=["Team A"])
        assert len(t.teams) == 2
        with pytest.raises(InvalidTournamentError):
            store.add(t)


class TestCrud:

    def test_update(self, store):
        t = _tournament()
        store.add(t)
        t.title = "Renamed"
        store.update(t)
        assert store.get(t.id).title == "Renamed"

    def test_update_missing(self, store):
        with pytest.raises(TournamentNotFoundError):
            store.update(_tournament())

    def test_modify_applies_change_under_lock(self, store):
        t = _tournament()
        store.add(t)

        def change(tournament):
            match = next(m for m in tournament.schedule if not m.is_bye_match)
            return tournament.record_result(match.id, 21, 3)

        match = store.modify(t.id, change)
        saved = store.get(t.id).find_match(match.id)
        assert saved.is_completed
        assert saved.team1_score == 21

    def test_modify_does_not_save_on_error(self, store):
        t = _tournament()
        store.add(t)

        def change(tournament):
            tournament.title = "Changed"
            raise ValueError("boom")

        with pytest.raises(ValueError):
            store.modify(t.id, change)
        assert store.get(t.id).title == "Nationals"

    def test_remove(self, store):
        first, second = _tournament(), _tournament(title="Regionals")
        store.add(first)
        store.add(second)
        store.remove(first.id)
        assert [t.id for t in store.list()] == [second.id]

    def test_remove_missing(self, store):
        with pytest.raises(TournamentNotFoundError):
            store.remove("nope")

    def test_get_missing(self, store):
        with pytest.raises(TournamentNotFoundError) as exc_info:
            store.get("nope")
        assert "nope" in str(exc_info.value)

    def test_remove_all(self, store):
        store.add(_tournament())
        store.remove_all()
        assert store.list() == []
