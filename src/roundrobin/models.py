import uuid

BYE_NAME = "Bye"
BYE_ID = "bye"

# Match ids are derived from the two team ids so regenerating the same
# roster yields the same ids.
MATCH_NAMESPACE = uuid.UUID('6f1c2b1e-3a0d-4c55-9d3e-0b7a4f6e2c91')


class Team:
    def __init__(self, name, id=None, wins=0, losses=0, is_bye=False):
        self.id = id if id else uuid.uuid4().hex
        self.name = name
        self.wins = wins
        self.losses = losses
        self.is_bye = is_bye

    @classmethod
    def bye(cls):
        """Placeholder entry that pads an odd roster to an even size."""
        return cls(name=BYE_NAME, id=BYE_ID, is_bye=True)

    def to_dict(self) -> dict:
        data = {'id': self.id, 'name': self.name, 'wins': self.wins, 'losses': self.losses}
        if self.is_bye:
            data['is_bye'] = True
        return data

    @classmethod
    def from_dict(cls, data: dict):
        return cls(
            name=data['name'],
            id=data.get('id'),
            wins=data.get('wins', 0),
            losses=data.get('losses', 0),
            is_bye=bool(data.get('is_bye', False)),
        )

    def __repr__(self):
        return f"Team(name={self.name}, wins={self.wins}, losses={self.losses}, is_bye={self.is_bye})"


class Match:
    def __init__(self, team1, team2, court_number, round, id=None,
                 team1_score=0, team2_score=0, is_completed=False):
        self.id = id if id else uuid.uuid5(MATCH_NAMESPACE, f"{team1.id}:{team2.id}").hex
        self.team1 = team1
        self.team2 = team2
        self.team1_score = team1_score
        self.team2_score = team2_score
        self.court_number = court_number  # 0 means no court (bye)
        self.round = round
        self.is_completed = is_completed

    @property
    def is_bye_match(self):
        return self.team1.is_bye or self.team2.is_bye

    @property
    def playing_team(self):
        """The real team in a bye match, None for a regular match."""
        if self.team1.is_bye:
            return self.team2
        if self.team2.is_bye:
            return self.team1
        return None

    @property
    def winner(self):
        if not self.is_completed or self.is_bye_match:
            return None
        if self.team1_score > self.team2_score:
            return self.team1
        if self.team2_score > self.team1_score:
            return self.team2
        return None

    def involves(self, team):
        return team.id in (self.team1.id, self.team2.id)

    def describe(self):
        playing = self.playing_team
        if playing is not None:
            return f"Round {self.round}: {playing.name} is on bye"
        return f"Round {self.round}, Court {self.court_number}: {self.team1.name} vs. {self.team2.name}"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'team1': self.team1.id,
            'team2': self.team2.id,
            'team1_score': self.team1_score,
            'team2_score': self.team2_score,
            'court_number': self.court_number,
            'round': self.round,
            'is_completed': self.is_completed,
        }

    @classmethod
    def from_dict(cls, data: dict, teams_by_id: dict):
        """Rebuild a match, resolving team ids against the tournament roster."""
        try:
            team1 = teams_by_id[data['team1']]
            team2 = teams_by_id[data['team2']]
        except KeyError as e:
            raise ValueError(f"Match {data.get('id')} references unknown team {e}") from e
        return cls(
            team1,
            team2,
            court_number=data.get('court_number', 0),
            round=data.get('round', 1),
            id=data.get('id'),
            team1_score=data.get('team1_score', 0),
            team2_score=data.get('team2_score', 0),
            is_completed=bool(data.get('is_completed', False)),
        )

    def __repr__(self):
        return (f"Match(round={self.round}, court={self.court_number}, "
                f"team1={self.team1.name}, team2={self.team2.name}, "
                f"score={self.team1_score}-{self.team2_score}, completed={self.is_completed})")
