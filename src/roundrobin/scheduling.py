"""
Round robin schedule generation.

Pairings come from the circle method: index 0 stays fixed while the other
indices rotate one step per theoretical round, so over n-1 rounds every team
meets every other team exactly once. An odd roster is padded with a bye
placeholder. Each theoretical round is then split into sessions that fit the
available courts; every session holding at least one real match becomes one
public round.
"""
import logging
import math
from typing import NamedTuple

from roundrobin.models import Team, Match

logger = logging.getLogger(__name__)


class Pairing(NamedTuple):
    first: int
    second: int

    def swapped(self):
        return Pairing(self.second, self.first)


class RoundPairings(NamedTuple):
    real: list
    bye: Pairing = None


def resolve_roster(teams):
    """Return the working roster: real teams plus one bye entry if their count is odd.

    An existing bye entry is reused, so resolving an already resolved roster
    gives back an equal roster.
    """
    real_teams = [team for team in teams if not team.is_bye]
    if len(real_teams) % 2 == 0:
        return real_teams
    bye = next((team for team in teams if team.is_bye), None) or Team.bye()
    return real_teams + [bye]


def generate_round_pairings(indices, ideal_round):
    """Circle method pairings for one theoretical round.

    Orientation flips on odd rounds to balance which side each team is
    listed on.
    """
    n = len(indices)
    pairings = []
    for i in range(n // 2):
        pairing = Pairing(indices[i], indices[n - 1 - i])
        pairings.append(pairing if ideal_round % 2 == 0 else pairing.swapped())
    return pairings


def rotate(permutation):
    """Move the last element to position 1; position 0 stays fixed."""
    if len(permutation) < 3:
        return list(permutation)
    return [permutation[0], permutation[-1]] + list(permutation[1:-1])


def rotate_pairings(pairings, ideal_round):
    """Shift the pairing list left so the leading pairing varies between rounds."""
    if not pairings:
        return []
    shift = ideal_round % len(pairings)
    return list(pairings[shift:]) + list(pairings[:shift])


def separate_pairings(pairings, roster):
    """Split a round's pairings into real pairings and the bye pairing (if any)."""
    real = []
    bye = None
    for pairing in pairings:
        if roster[pairing.first].is_bye or roster[pairing.second].is_bye:
            bye = pairing
        else:
            real.append(pairing)
    return RoundPairings(real, bye)


def pack_sessions(round_pairings, available_courts):
    """Split one theoretical round into sessions of at most available_courts real pairings.

    The bye pairing is folded into the first session. A round with only a
    bye still yields a single session so the bye gets recorded.
    """
    real = round_pairings.real
    session_count = math.ceil(len(real) / available_courts) if real else 0
    if round_pairings.bye is not None:
        session_count = max(session_count, 1)

    sessions = []
    for session in range(session_count):
        start = session * available_courts
        chunk = list(real[start:start + available_courts])
        if session == 0 and round_pairings.bye is not None:
            chunk.insert(0, round_pairings.bye)
        sessions.append(chunk)
    return sessions


def materialize_session(session_pairings, roster, round_number):
    """Turn a session's pairings into matches.

    The bye entry always goes in team1 and gets court 0. Real matches are
    numbered 1..k in pairing order.
    """
    matches = []
    court = 0
    for pairing in session_pairings:
        team1 = roster[pairing.first]
        team2 = roster[pairing.second]
        if team2.is_bye and not team1.is_bye:
            team1, team2 = team2, team1

        if team1.is_bye or team2.is_bye:
            court_number = 0
        else:
            court += 1
            court_number = court
        matches.append(Match(team1, team2, court_number=court_number, round=round_number))
    return matches


def process_round(pairings, roster, available_courts, round_counter):
    """Pack and materialize one theoretical round.

    Returns (matches, next_round). The counter only advances for sessions
    that contain a real match.
    """
    round_pairings = separate_pairings(pairings, roster)
    matches = []
    current_round = round_counter
    for session_pairings in pack_sessions(round_pairings, available_courts):
        matches.extend(materialize_session(session_pairings, roster, current_round))
        if any(pairing != round_pairings.bye for pairing in session_pairings):
            current_round += 1
    return matches, current_round


def generate_schedule(teams, available_courts):
    """Generate the full round robin schedule for teams on available_courts courts.

    Returns an ordered list of Match records. An empty roster gives an empty
    schedule.
    """
    if available_courts < 1:
        raise ValueError(f"available_courts must be at least 1, got {available_courts}")
    if not teams:
        return []

    roster = resolve_roster(teams)
    if not roster:
        return []

    schedule = []
    indices = list(range(len(roster)))
    current_round = 1
    for ideal_round in range(len(roster) - 1):
        pairings = rotate_pairings(generate_round_pairings(indices, ideal_round), ideal_round)
        round_matches, current_round = process_round(pairings, roster, available_courts, current_round)
        schedule.extend(round_matches)
        indices = rotate(indices)

    logger.debug("Generated %d matches over %d rounds for %d teams on %d courts",
                 len(schedule), current_round - 1, len(roster), available_courts)
    return schedule
