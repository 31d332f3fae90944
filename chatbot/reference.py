from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping, Protocol

import pandas as pd

from .types import QueryResult


SNAKE_CASE_RE = re.compile(r"[^a-z0-9]+")

ROSTER_ALIASES = {
    "player_name": ["player_name", "player", "name", "playername", "full_name"],
    "allow_on_site": ["allow_on_site", "allowonsite", "public", "show_on_site"],
}

SUBJECT_NAMES_QUERY = """
MATCH (p:Player)
WHERE coalesce(p.allowOnSite, true) = true
RETURN p.playerName AS name
ORDER BY name
"""

FALSY = {"false", "no", "n", "0", ""}


class QueryRunner(Protocol):
    def run_query(self, query: str, params: dict) -> QueryResult: ...


def to_snake_case(value: str) -> str:
    return SNAKE_CASE_RE.sub("_", value.strip().lower()).strip("_")


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {col: to_snake_case(str(col)) for col in df.columns}
    return df.rename(columns=renamed)


def apply_aliases(df: pd.DataFrame, aliases: Mapping[str, list[str]]) -> pd.DataFrame:
    rename_map: dict[str, str] = {}
    cols = set(df.columns)

    for canonical, candidates in aliases.items():
        for candidate in candidates:
            candidate_snake = to_snake_case(candidate)
            if candidate_snake in cols:
                rename_map[candidate_snake] = canonical
                break

    return df.rename(columns=rename_map)


def load_subject_names_from_csv(path: str | Path) -> list[str]:
    df = apply_aliases(normalize_columns(pd.read_csv(path, dtype=str)), ROSTER_ALIASES)
    if "player_name" not in df.columns:
        raise ValueError(f"Roster file {path} has no player name column.")

    if "allow_on_site" in df.columns:
        allowed = df["allow_on_site"].fillna("true").str.strip().str.lower()
        df = df[~allowed.isin(FALSY)]

    names = df["player_name"].dropna().str.strip()
    return sorted({name for name in names if name})


def fetch_subject_names(executor: QueryRunner) -> list[str]:
    result = executor.run_query(SUBJECT_NAMES_QUERY, {})
    names = {str(record.get("name")).strip() for record in result.records if record.get("name")}
    return sorted(name for name in names if name)
