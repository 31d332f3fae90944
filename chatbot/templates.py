from __future__ import annotations

from typing import Any

from .metrics import DEFAULT_CATALOG, MetricCatalog, MetricDefinition, MetricFamily
from .types import QueryPlan, QuestionAnalysis, SubjectType, TimeFrameType


GOALS = "coalesce(md.goals, 0) + coalesce(md.penaltiesScored, 0)"
HOME_GAMES = "sum(CASE WHEN f.homeOrAway = 'Home' THEN 1 ELSE 0 END)"
AWAY_GAMES = "sum(CASE WHEN f.homeOrAway = 'Away' THEN 1 ELSE 0 END)"
HOME_WINS = "sum(CASE WHEN f.homeOrAway = 'Home' AND f.result = 'W' THEN 1 ELSE 0 END)"
AWAY_WINS = "sum(CASE WHEN f.homeOrAway = 'Away' AND f.result = 'W' THEN 1 ELSE 0 END)"


def _total(field: str) -> str:
    return f"sum(coalesce(md.{field}, 0))"


def _ratio(numerator: str, denominator: str) -> str:
    return f"CASE WHEN {denominator} > 0 THEN toFloat({numerator}) / {denominator} ELSE 0.0 END"


def _percentage(numerator: str, denominator: str) -> str:
    return f"CASE WHEN {denominator} > 0 THEN 100.0 * {numerator} / {denominator} ELSE 0.0 END"


AGGREGATIONS = {
    "APP": "count(md)",
    "MIN": _total("minutes"),
    "MOM": _total("mom"),
    "G": f"sum({GOALS})",
    "OPENPLAYGOALS": _total("goals"),
    "A": _total("assists"),
    "GI": f"sum({GOALS} + coalesce(md.assists, 0))",
    "Y": _total("yellowCards"),
    "R": _total("redCards"),
    "SAVES": _total("saves"),
    "OG": _total("ownGoals"),
    "C": _total("conceded"),
    "CLS": _total("cleanSheets"),
    "PSC": _total("penaltiesScored"),
    "PM": _total("penaltiesMissed"),
    "PCO": _total("penaltiesConceded"),
    "PSV": _total("penaltiesSaved"),
    "FTP": _total("fantasyPoints"),
    "DIST": "sum(toFloat(coalesce(md.distance, 0)))",
    "HomeGames": HOME_GAMES,
    "AwayGames": AWAY_GAMES,
    "HomeWins": HOME_WINS,
    "AwayWins": AWAY_WINS,
    "GperAPP": _ratio(f"sum({GOALS})", "count(md)"),
    "CperAPP": _ratio(_total("conceded"), "count(md)"),
    "FTPperAPP": _ratio(_total("fantasyPoints"), "count(md)"),
    "MperG": _ratio(_total("minutes"), f"sum({GOALS})"),
    "MperCLS": _ratio(_total("minutes"), _total("cleanSheets")),
    "Games%Won": _percentage("sum(CASE WHEN f.result = 'W' THEN 1 ELSE 0 END)", "count(md)"),
    "HomeGames%Won": _percentage(HOME_WINS, HOME_GAMES),
    "AwayGames%Won": _percentage(AWAY_WINS, AWAY_GAMES),
    "PenaltyConversionRate": _percentage(
        _total("penaltiesScored"),
        f"({_total('penaltiesScored')} + {_total('penaltiesMissed')})",
    ),
}

AFFILIATION_TOTALS = {
    "MostPlayedForTeam": "count(md)",
    "MostScoredForTeam": f"sum({GOALS})",
}

FIXTURE_METRICS = {
    "HomeGames",
    "AwayGames",
    "HomeWins",
    "AwayWins",
    "Games%Won",
    "HomeGames%Won",
    "AwayGames%Won",
}


class CypherQueryBuilder:
    def __init__(self, catalog: MetricCatalog = DEFAULT_CATALOG):
        self.catalog = catalog

    def build(self, analysis: QuestionAnalysis) -> list[QueryPlan]:
        if analysis.type == SubjectType.UNKNOWN or not analysis.metrics:
            return []
        if analysis.type != SubjectType.CLUB and not analysis.entities:
            return []

        shared: dict[tuple[str, ...], list[MetricDefinition]] = {}
        plans: list[QueryPlan] = []

        for key in analysis.metrics:
            definition = self.catalog.get(key)
            if definition is None:
                continue

            omitted = self._omitted_filters(definition, analysis)
            if definition.family == MetricFamily.TEAM_AFFILIATION:
                plan = self._build_affiliation(definition, analysis, omitted)
                if plan is not None:
                    plans.append(plan)
                continue
            if definition.family != MetricFamily.TEAM_APPEARANCES and definition.key not in AGGREGATIONS:
                continue
            shared.setdefault(omitted, []).append(definition)

        shared_plans = [
            self._build_aggregate(definitions, analysis, omitted)
            for omitted, definitions in shared.items()
        ]
        return shared_plans + plans

    def _omitted_filters(self, definition: MetricDefinition, analysis: QuestionAnalysis) -> tuple[str, ...]:
        extraction = analysis.extraction_result
        omitted: list[str] = []

        if definition.location and extraction.locations:
            omitted.append("location")
        if definition.family in (MetricFamily.TEAM_APPEARANCES, MetricFamily.TEAM_AFFILIATION) and extraction.team_entities:
            omitted.append("team")
        if definition.category == "wins" and extraction.results:
            omitted.append("result")
        return tuple(omitted)

    def _build_aggregate(
        self,
        definitions: list[MetricDefinition],
        analysis: QuestionAnalysis,
        omitted: tuple[str, ...],
    ) -> QueryPlan:
        match_clause, where, params, notes, needs_fixture = self._scope(analysis, omitted)

        projections: list[str] = []
        columns: dict[str, str] = {}
        for index, definition in enumerate(definitions):
            column = f"value_{index}"
            if definition.family == MetricFamily.TEAM_APPEARANCES:
                param = f"squad_{index}"
                params[param] = (definition.squad or "").upper()
                expression = f"sum(CASE WHEN toUpper(md.team) = ${param} THEN 1 ELSE 0 END)"
            else:
                expression = AGGREGATIONS[definition.key]
                needs_fixture = needs_fixture or definition.key in FIXTURE_METRICS
            projections.append(f"{expression} AS {column}")
            columns[definition.key] = column

        for name in omitted:
            notes.append(
                f"{name.capitalize()} filter omitted for {', '.join(d.key for d in definitions)}."
            )

        query = self._assemble(
            match_clause,
            needs_fixture,
            where,
            "RETURN " + ",\n       ".join([*projections, "count(md) AS appearances"]),
        )
        return QueryPlan(
            query=query,
            params=params,
            metrics=[definition.key for definition in definitions],
            columns=columns,
            notes=notes,
        )

    def _build_affiliation(
        self,
        definition: MetricDefinition,
        analysis: QuestionAnalysis,
        omitted: tuple[str, ...],
    ) -> QueryPlan | None:
        total = AFFILIATION_TOTALS.get(definition.key)
        if total is None:
            return None

        match_clause, where, params, notes, needs_fixture = self._scope(analysis, omitted)
        for name in omitted:
            notes.append(f"{name.capitalize()} filter omitted for {definition.key}.")

        tail = (
            f"WITH md.team AS team, {total} AS total, count(md) AS games\n"
            "WHERE total > 0\n"
            "RETURN team AS value, games AS appearances, total\n"
            "ORDER BY total DESC, value ASC\n"
            "LIMIT 1"
        )
        return QueryPlan(
            query=self._assemble(match_clause, needs_fixture, where, tail),
            params=params,
            metrics=[definition.key],
            columns={definition.key: "value"},
            notes=notes,
        )

    def _assemble(self, match_clause: str, needs_fixture: bool, where: list[str], tail: str) -> str:
        lines = [match_clause]
        if needs_fixture:
            lines.append("MATCH (f:Fixture)-[:HAS_MATCH_DETAILS]->(md)")
        if where:
            lines.append("WHERE " + "\n  AND ".join(where))
        lines.append(tail)
        return "\n".join(lines)

    def _scope(
        self,
        analysis: QuestionAnalysis,
        omitted: tuple[str, ...],
    ) -> tuple[str, list[str], dict[str, Any], list[str], bool]:
        extraction = analysis.extraction_result
        where: list[str] = []
        params: dict[str, Any] = {}
        notes: list[str] = []
        needs_fixture = False

        if analysis.type == SubjectType.PLAYER:
            match_clause = "MATCH (p:Player {playerName: $playerName})-[:PLAYED_IN]->(md:MatchDetail)"
            params["playerName"] = analysis.entities[0]
            notes.append(f"Player scope: {analysis.entities[0]}.")
        elif analysis.type == SubjectType.TEAM:
            match_clause = "MATCH (md:MatchDetail)"
            where.append("toUpper(md.team) = $team")
            params["team"] = analysis.entities[0].upper()
            notes.append(f"Team scope: {analysis.entities[0]}.")
        else:
            match_clause = "MATCH (md:MatchDetail)"
            notes.append("Club scope: all teams.")

        time_clauses, time_params, time_note, time_needs_fixture = self._time_clause(analysis)
        where.extend(time_clauses)
        params.update(time_params)
        notes.append(time_note)
        needs_fixture = needs_fixture or time_needs_fixture

        if analysis.type == SubjectType.PLAYER and extraction.team_entities and "team" not in omitted:
            where.append("toUpper(md.team) IN $teams")
            params["teams"] = [team.upper() for team in extraction.team_entities]
            notes.append(f"Team filter: {', '.join(extraction.team_entities)}.")

        if extraction.team_exclusions:
            where.append("NOT toUpper(md.team) IN $excludedTeams")
            params["excludedTeams"] = [team.upper() for team in extraction.team_exclusions]
            notes.append(f"Excluding: {', '.join(extraction.team_exclusions)}.")

        if "location" not in omitted:
            if len(extraction.locations) == 1:
                where.append("f.homeOrAway = $location")
                params["location"] = extraction.locations[0].capitalize()
                needs_fixture = True
            elif len(extraction.locations) > 1:
                notes.append("Home and away both requested; location filter omitted.")

        if extraction.oppositions:
            where.append("toLower(f.opposition) CONTAINS toLower($opposition)")
            params["opposition"] = extraction.oppositions[0]
            needs_fixture = True

        if extraction.competition_types:
            where.append("f.compType IN $compTypes")
            params["compTypes"] = list(extraction.competition_types)
            needs_fixture = True

        if extraction.results and "result" not in omitted:
            where.append("f.result IN $results")
            params["results"] = list(extraction.results)
            needs_fixture = True

        if extraction.positions:
            where.append("md.class IN $positions")
            params["positions"] = list(extraction.positions)

        return match_clause, where, params, notes, needs_fixture

    def _time_clause(self, analysis: QuestionAnalysis) -> tuple[list[str], dict[str, Any], str, bool]:
        extraction = analysis.extraction_result
        if not extraction.time_frames:
            if extraction.single_date:
                return ["md.date = $onDate"], {"onDate": extraction.single_date}, f"Date: {extraction.single_date}.", False
            return [], {}, "Time scope: all seasons.", False

        frame = extraction.time_frames[0]
        if frame.type == TimeFrameType.SEASON:
            return ["f.season = $season"], {"season": frame.value}, f"Season: {frame.value}.", True
        if frame.type == TimeFrameType.BEFORE:
            return ["md.date < $beforeDate"], {"beforeDate": frame.end}, f"Before: {frame.end}.", False
        if frame.type == TimeFrameType.SINCE:
            return ["md.date >= $sinceDate"], {"sinceDate": frame.start}, f"Since: {frame.start}.", False

        return (
            ["md.date >= $startDate", "md.date <= $endDate"],
            {"startDate": frame.start, "endDate": frame.end},
            f"Range: {frame.start} to {frame.end}.",
            False,
        )
