import pytest
from pydantic import ValidationError

from movieclub.config import ConfigError, Settings, parse_roster

REQUIRED = {
    "DATABASE_URL": "postgresql://localhost/movieclub",
    "API_TOKEN": "token",
    "TMDB_API_KEY": "key",
}


def test_defaults(tmp_path):
    settings = Settings.from_env(dict(REQUIRED), secrets_dir=str(tmp_path))

    assert settings.port == 4600
    assert settings.log_level == "info"
    assert settings.secure_cookies is True
    assert settings.db_pool_size == 5
    assert settings.persons == (("D", "Dana"), ("J", "Jordan"), ("C", "Casey"), ("A", "Alex"))


def test_overrides(tmp_path):
    env = dict(REQUIRED, PORT="8080", LOG_LEVEL="DEBUG", SECURE_COOKIES="false",
               PERSONS="X:Xavier,Y:Yuki", TMDB_TIMEOUT="2.5")

    settings = Settings.from_env(env, secrets_dir=str(tmp_path))

    assert settings.port == 8080
    assert settings.log_level == "debug"
    assert settings.secure_cookies is False
    assert settings.tmdb_timeout == 2.5
    assert settings.persons == (("X", "Xavier"), ("Y", "Yuki"))


@pytest.mark.parametrize("missing", ["DATABASE_URL", "API_TOKEN", "TMDB_API_KEY"])
def test_missing_required_value(tmp_path, missing):
    env = dict(REQUIRED)
    del env[missing]

    with pytest.raises(ConfigError, match=missing):
        Settings.from_env(env, secrets_dir=str(tmp_path))


def test_secret_from_file_variable(tmp_path):
    secret = tmp_path / "token.txt"
    secret.write_text("from-file\n")
    env = dict(REQUIRED)
    del env["API_TOKEN"]
    env["API_TOKEN_FILE"] = str(secret)

    assert Settings.from_env(env, secrets_dir=str(tmp_path)).api_token == "from-file"


def test_secret_from_secrets_dir(tmp_path):
    (tmp_path / "movieclub_tmdb_api_key").write_text("docker-secret")
    env = dict(REQUIRED)
    del env["TMDB_API_KEY"]

    assert Settings.from_env(env, secrets_dir=str(tmp_path)).tmdb_api_key == "docker-secret"


def test_empty_secret_file_is_an_error(tmp_path):
    secret = tmp_path / "empty.txt"
    secret.write_text("  \n")
    env = dict(REQUIRED)
    del env["API_TOKEN"]
    env["API_TOKEN_FILE"] = str(secret)

    with pytest.raises(ConfigError):
        Settings.from_env(env, secrets_dir=str(tmp_path))


def test_invalid_number(tmp_path):
    with pytest.raises(ConfigError):
        Settings.from_env(dict(REQUIRED, PORT="eighty"), secrets_dir=str(tmp_path))


def test_settings_are_immutable(tmp_path):
    settings = Settings.from_env(dict(REQUIRED), secrets_dir=str(tmp_path))

    with pytest.raises(ValidationError):
        settings.port = 1


@pytest.mark.parametrize("raw", ["D:Dana,D:Dup", "Dana", ":Dana", "D:"])
def test_parse_roster_rejects_bad_input(raw):
    with pytest.raises(ConfigError):
        parse_roster(raw)
