import argparse
import os
import sys
import yaml
from roundrobin.models import Team
from roundrobin.scheduling import generate_schedule


def load_teams(file_path):
    """Load team names from a YAML list (or a mapping with a 'teams' list)."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    if isinstance(data, dict):
        data = data.get('teams', [])
    teams = []
    for team_name in data or []:
        name = str(team_name).strip()
        if name:
            teams.append(Team(name=name))
    return teams


def format_schedule(schedule):
    lines = []
    current_round = None
    for match in schedule:
        if match.round != current_round:
            if current_round is not None:
                lines.append("")  # Blank line between rounds
            lines.append(f"# Round {match.round}")
            current_round = match.round
        if match.is_bye_match:
            lines.append(f"Bye: {match.playing_team.name}")
        else:
            lines.append(f"Court {match.court_number}: {match.team1.name} vs {match.team2.name}")
    return lines


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description="Print a round robin schedule.")
    parser.add_argument('teams_file', nargs='?', default=os.path.join(base_dir, 'data', 'teams.yaml'),
                        help="YAML file with the list of team names")
    parser.add_argument('--courts', type=int, default=1, help="Number of available courts (default: 1)")
    args = parser.parse_args(argv)

    if args.courts < 1:
        print("Error: --courts must be at least 1", file=sys.stderr)
        return 1

    try:
        teams = load_teams(args.teams_file)
    except (OSError, yaml.YAMLError) as e:
        print(f"Error: Failed to read {args.teams_file}: {e}", file=sys.stderr)
        return 1
    if not teams:
        print(f"No teams loaded. Check {args.teams_file}", file=sys.stderr)
        return 1

    for line in format_schedule(generate_schedule(teams, args.courts)):
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
