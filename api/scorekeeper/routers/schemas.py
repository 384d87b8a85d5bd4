"""Pydantic response models for the scorekeeper API (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ..db.games import Game, GameAttendance
from ..services.event_types import GameEvent, GoalEvent, PenaltyEvent, ShotEvent, period_label
from ..db.teams import RosterPlayer, Team
from ..services.rosters import TeamRoster
from ..services.stats import PlayerAttendance, PlayerGameLine, PlayerTotals, Scoreboard, TeamLine


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GameResponse(_ApiModel):
    id: str
    home_team: str = Field(..., alias="homeTeam")
    away_team: str = Field(..., alias="awayTeam")
    division: str
    season: str
    year: int
    scheduled_at: datetime = Field(..., alias="scheduledAt")
    venue: str | None = None
    status: str
    home_score: int | None = Field(None, alias="homeScore")
    away_score: int | None = Field(None, alias="awayScore")

    @classmethod
    def from_game(cls, game: Game) -> "GameResponse":
        return cls(
            id=game.id,
            home_team=game.home_team,
            away_team=game.away_team,
            division=game.division,
            season=game.season,
            year=game.year,
            scheduled_at=game.scheduled_at,
            venue=game.venue,
            status=game.status,
            home_score=game.home_score,
            away_score=game.away_score,
        )


class DivisionResponse(_ApiModel):
    id: str
    name: str


# =============================================================================
# EVENTS
# =============================================================================


class _EventResponse(_ApiModel):
    id: str
    game_id: str = Field(..., alias="gameId")
    team: str
    period: str
    recorded_at: datetime = Field(..., alias="recordedAt")


class GoalEventResponse(_EventResponse):
    event_type: Literal["goal"] = Field("goal", alias="eventType")
    player: str
    time: str
    assists: list[str]
    shot_type: str = Field(..., alias="shotType")
    goal_type: str = Field(..., alias="goalType")
    breakaway: bool
    description: str
    scoring_team_goals_for: int = Field(..., alias="scoringTeamGoalsFor")
    scoring_team_goals_against: int = Field(..., alias="scoringTeamGoalsAgainst")
    scorer_goals_in_game: int = Field(..., alias="scorerGoalsInGame")


class PenaltyEventResponse(_EventResponse):
    event_type: Literal["penalty"] = Field("penalty", alias="eventType")
    player: str
    time: str
    penalty_type: str = Field(..., alias="penaltyType")
    infraction: str | None = None
    duration: int
    penalty_sequence_number: int = Field(..., alias="penaltySequenceNumber")


class ShotEventResponse(_EventResponse):
    event_type: Literal["shot"] = Field("shot", alias="eventType")
    shots: int
    team_shots_in_game: int = Field(..., alias="teamShotsInGame")


EventResponse = Annotated[
    Union[GoalEventResponse, PenaltyEventResponse, ShotEventResponse],
    Field(discriminator="event_type"),
]


def _common(event: GameEvent) -> dict[str, Any]:
    return {
        "id": event.id,
        "game_id": event.game_id,
        "team": event.team,
        "period": period_label(event.period),
        "recorded_at": event.recorded_at,
    }


def goal_response(event: GoalEvent) -> GoalEventResponse:
    return GoalEventResponse(
        **_common(event),
        player=event.player,
        time=event.time,
        assists=list(event.assists),
        shot_type=event.shot_type,
        goal_type=event.goal_type,
        breakaway=event.breakaway,
        description=event.description,
        scoring_team_goals_for=event.scoring_team_goals_for,
        scoring_team_goals_against=event.scoring_team_goals_against,
        scorer_goals_in_game=event.scorer_goals_in_game,
    )


def penalty_response(event: PenaltyEvent) -> PenaltyEventResponse:
    return PenaltyEventResponse(
        **_common(event),
        player=event.player,
        time=event.time,
        penalty_type=event.penalty_type,
        infraction=event.infraction,
        duration=event.duration_minutes,
        penalty_sequence_number=event.penalty_sequence_number,
    )


def shot_response(event: ShotEvent) -> ShotEventResponse:
    return ShotEventResponse(
        **_common(event), shots=event.shots, team_shots_in_game=event.team_shots_in_game
    )


def event_response(event: GameEvent) -> GoalEventResponse | PenaltyEventResponse | ShotEventResponse:
    if isinstance(event, GoalEvent):
        return goal_response(event)
    if isinstance(event, PenaltyEvent):
        return penalty_response(event)
    return shot_response(event)


# =============================================================================
# STATS
# =============================================================================


class PlayerGameLineResponse(_ApiModel):
    game_id: str = Field(..., alias="gameId")
    player: str
    goals: int
    assists: int
    points: int
    penalty_minutes: int = Field(..., alias="penaltyMinutes")

    @classmethod
    def from_line(cls, game_id: str, player: str, line: PlayerGameLine) -> "PlayerGameLineResponse":
        return cls(
            game_id=game_id,
            player=player,
            goals=line.goals,
            assists=line.assists,
            points=line.points,
            penalty_minutes=line.penalty_minutes,
        )


class TeamLineResponse(_ApiModel):
    team: str
    goals: int
    shots: int
    penalty_minutes: int = Field(..., alias="penaltyMinutes")

    @classmethod
    def from_line(cls, line: TeamLine) -> "TeamLineResponse":
        return cls(
            team=line.team, goals=line.goals, shots=line.shots, penalty_minutes=line.penalty_minutes
        )


class ScoreboardResponse(_ApiModel):
    game_id: str = Field(..., alias="gameId")
    status: str
    home: TeamLineResponse
    away: TeamLineResponse

    @classmethod
    def from_scoreboard(cls, game: Game, scoreboard: Scoreboard) -> "ScoreboardResponse":
        return cls(
            game_id=scoreboard.game_id,
            status=game.status,
            home=TeamLineResponse.from_line(scoreboard.home),
            away=TeamLineResponse.from_line(scoreboard.away),
        )


class PlayerTotalsResponse(_ApiModel):
    player: str
    games_played: int = Field(..., alias="gamesPlayed")
    games_with_point: int = Field(..., alias="gamesWithPoint")
    goals: int
    assists: int
    points: int
    penalty_minutes: int = Field(..., alias="penaltyMinutes")

    @classmethod
    def from_totals(cls, totals: PlayerTotals) -> "PlayerTotalsResponse":
        return cls(
            player=totals.player,
            games_played=totals.games_played,
            games_with_point=totals.games_with_point,
            goals=totals.goals,
            assists=totals.assists,
            points=totals.points,
            penalty_minutes=totals.penalty_minutes,
        )


# =============================================================================
# TEAMS / ROSTERS
# =============================================================================


class TeamResponse(_ApiModel):
    id: str
    name: str
    division: str

    @classmethod
    def from_team(cls, team: Team) -> "TeamResponse":
        return cls(id=team.id, name=team.name, division=team.division)


class RosterPlayerResponse(_ApiModel):
    player_id: int = Field(..., alias="playerId")
    name: str
    number: str
    position: str

    @classmethod
    def from_player(cls, player: RosterPlayer) -> "RosterPlayerResponse":
        return cls(
            player_id=player.id,
            name=player.name,
            number=player.number or "",
            position=player.position or "",
        )


class GameRosterResponse(_ApiModel):
    team_name: str = Field(..., alias="teamName")
    team_id: str | None = Field(None, alias="teamId")
    team_type: Literal["home", "away"] = Field(..., alias="teamType")
    players: list[RosterPlayerResponse]

    @classmethod
    def from_roster(cls, roster: TeamRoster) -> "GameRosterResponse":
        return cls(
            team_name=roster.team_name,
            team_id=roster.team_id,
            team_type=roster.team_type,
            players=[RosterPlayerResponse.from_player(player) for player in roster.players],
        )


class PlayerAttendanceResponse(_ApiModel):
    player: str
    team: str
    games_attended: int = Field(..., alias="gamesAttended")
    games_with_attendance: int = Field(..., alias="gamesWithAttendance")
    scheduled_games: int = Field(..., alias="scheduledGames")
    attendance_percentage: int = Field(..., alias="attendancePercentage")

    @classmethod
    def from_line(cls, line: PlayerAttendance) -> "PlayerAttendanceResponse":
        return cls(
            player=line.player,
            team=line.team,
            games_attended=line.games_attended,
            games_with_attendance=line.games_with_attendance,
            scheduled_games=line.scheduled_games,
            attendance_percentage=line.attendance_percentage,
        )


# =============================================================================
# ATTENDANCE / ANNOUNCER
# =============================================================================


class AttendanceResponse(_ApiModel):
    id: str
    game_id: str = Field(..., alias="gameId")
    teams: list[dict[str, Any]]
    total_roster_size: int = Field(..., alias="totalRosterSize")
    total_present: int = Field(..., alias="totalPresent")
    recorded_at: datetime = Field(..., alias="recordedAt")

    @classmethod
    def from_record(cls, record: GameAttendance) -> "AttendanceResponse":
        return cls(
            id=record.id,
            game_id=record.game_id,
            teams=record.teams,
            total_roster_size=record.total_roster_size,
            total_present=record.total_present,
            recorded_at=record.recorded_at,
        )


class AnnouncementResponse(_ApiModel):
    text: str
    source: Literal["ai", "fallback"]
    context: dict[str, Any]


class SpeechRequest(_ApiModel):
    text: str = Field(..., min_length=1, max_length=1000)
