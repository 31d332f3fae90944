import pytest

from chatbot import config
from chatbot.config import load_chatbot_settings


ENV_VARS = [
    "NEO4J_URI",
    "NEO4J_USER",
    "NEO4J_PASSWORD",
    "NEO4J_DATABASE",
    "NEO4J_MAX_RETRY_TIME",
    "QUERY_MAX_ROWS",
    "SUBJECTS_CSV",
    "CHATBOT_DEBUG",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_missing_uri_is_an_error() -> None:
    with pytest.raises(RuntimeError):
        load_chatbot_settings()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEO4J_URI", "bolt://localhost:7687")

    settings = load_chatbot_settings()

    assert settings.neo4j_user == "neo4j"
    assert settings.neo4j_database == "neo4j"
    assert settings.max_retry_time == 15.0
    assert settings.query_max_rows == 100
    assert settings.subjects_csv is None
    assert settings.debug is False
    assert settings.log_level == "INFO"


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEO4J_URI", "neo4j+s://graph.example:7687")
    monkeypatch.setenv("NEO4J_DATABASE", "club")
    monkeypatch.setenv("QUERY_MAX_ROWS", "25")
    monkeypatch.setenv("SUBJECTS_CSV", "data/players.csv")
    monkeypatch.setenv("CHATBOT_DEBUG", "Yes")

    settings = load_chatbot_settings()

    assert settings.neo4j_database == "club"
    assert settings.query_max_rows == 25
    assert settings.subjects_csv == "data/players.csv"
    assert settings.debug is True
