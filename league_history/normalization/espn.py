from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from league_history.identity.resolver import IdentityResolver
from league_history.models.enums import DataSource
from league_history.models.owner import Owner
from league_history.models.season import RawSeason, Standing, TeamScore, WeeklyMatchup

DEFAULT_PLAYOFF_TEAM_COUNT = 6
UNRANKED = 99


def _team_name(team: Dict[str, Any]) -> str:
    name = f"{team.get('location') or ''} {team.get('nickname') or ''}".strip()
    return name or team.get("name") or team.get("abbrev") or "Unknown Team"


def _member_owner_names(
    teams: List[Dict[str, Any]],
    members: List[Dict[str, Any]],
    resolver: IdentityResolver,
    known_owners: Optional[Iterable[Owner]] = None,
) -> Dict[int, str]:
    """Maps ESPN team id -> canonical owner name via the team's first owner."""
    members_by_id = {m.get("id"): m for m in members if isinstance(m, dict)}
    owners: Dict[int, str] = {}
    for team in teams:
        member_ids = team.get("owners") or []
        member = members_by_id.get(member_ids[0]) if member_ids else None
        if not member:
            logger.warning(f"ESPN team {team.get('id')} ({_team_name(team)}) has no owner member")
            continue
        owners[team.get("id")] = resolver.resolve_member(
            member.get("displayName"),
            member.get("firstName"),
            member.get("lastName"),
            team_name=_team_name(team),
            known_owners=known_owners,
        )
    return owners


def _regular_season_weeks(settings: Dict[str, Any]) -> Optional[int]:
    schedule_settings = settings.get("scheduleSettings") or {}
    return (
        schedule_settings.get("matchupPeriodCount")
        or settings.get("regularSeasonMatchupPeriodCount")
        or None
    )


def _playoff_team_count(settings: Dict[str, Any], default: int) -> int:
    schedule_settings = settings.get("scheduleSettings") or {}
    return (
        schedule_settings.get("playoffTeamCount")
        or settings.get("playoffTeamCount")
        or default
    )


def process_league_payload(
    payload: Dict[str, Any],
    year: int,
    resolver: IdentityResolver,
    points_multiplier: float = 1.0,
    default_playoff_team_count: int = DEFAULT_PLAYOFF_TEAM_COUNT,
    known_owners: Optional[Iterable[Owner]] = None,
) -> RawSeason:
    """Maps one season of the fantasy platform's league payload to a RawSeason.

    Only the field mapping lives here; fetching the payload is the caller's job.
    ``made_playoffs`` is left for the normalizer to derive from the final
    rank and ``playoff_team_count``. ``known_owners`` (usually the previous
    run's owners) let members with no real name match an existing owner.
    """
    teams = [t for t in payload.get("teams") or [] if isinstance(t, dict)]
    members = payload.get("members") or []
    schedule = payload.get("schedule") or []
    settings = payload.get("settings") or {}

    known_owners = list(known_owners or [])
    owner_by_team = _member_owner_names(teams, members, resolver, known_owners)
    name_by_team = {team.get("id"): _team_name(team) for team in teams}
    playoff_team_count = _playoff_team_count(settings, default_playoff_team_count)

    standings: List[Standing] = []
    for team in teams:
        record = (team.get("record") or {}).get("overall") or {}
        # rankCalculatedFinal is the placement after playoffs; playoffSeed
        # is only the seeding going in (older seasons lack the former)
        final_rank = team.get("rankCalculatedFinal") or team.get("playoffSeed") or UNRANKED
        standings.append(
            Standing(
                rank=final_rank,
                owner_name=owner_by_team.get(team.get("id"), "Unknown"),
                team_name=name_by_team.get(team.get("id"), "Unknown Team"),
                wins=record.get("wins") or 0,
                losses=record.get("losses") or 0,
                ties=record.get("ties") or 0,
                points_for=(team.get("points") or 0) * points_multiplier,
                points_against=(team.get("pointsAgainst") or 0) * points_multiplier,
            )
        )

    regular_weeks = _regular_season_weeks(settings)
    matchups: List[WeeklyMatchup] = []
    for raw_matchup in schedule:
        if not isinstance(raw_matchup, dict):
            continue
        home, away = raw_matchup.get("home"), raw_matchup.get("away")
        # Bye weeks have no away side
        if not home or not away:
            continue
        week = raw_matchup.get("matchupPeriodId")
        if not week:
            logger.debug(f"Skipping ESPN matchup {raw_matchup.get('id')} with no period")
            continue
        matchups.append(
            WeeklyMatchup(
                week=week,
                matchup_id=raw_matchup.get("id") or 0,
                home_team=_team_score(home, owner_by_team, name_by_team, points_multiplier),
                away_team=_team_score(away, owner_by_team, name_by_team, points_multiplier),
                is_playoff=bool(regular_weeks and week > regular_weeks),
            )
        )

    logger.info(
        f"Processed ESPN payload for {year}: {len(standings)} teams, {len(matchups)} matchups"
    )
    return RawSeason(
        year=year,
        standings=standings,
        matchups=matchups or None,
        regular_season_weeks=regular_weeks,
        playoff_team_count=playoff_team_count,
        source=DataSource.ESPN,
    )


def _team_score(
    side: Dict[str, Any],
    owner_by_team: Dict[int, str],
    name_by_team: Dict[int, str],
    points_multiplier: float,
) -> TeamScore:
    team_id = side.get("teamId")
    projected = side.get("totalProjectedPoints")
    return TeamScore(
        owner_name=owner_by_team.get(team_id, "Unknown"),
        team_name=name_by_team.get(team_id, "Unknown Team"),
        score=(side.get("totalPoints") or 0) * points_multiplier,
        projected=projected * points_multiplier if projected else None,
    )
