from sql_user_storage.env import expand_env


def test_expand_set_variable(monkeypatch) -> None:
    monkeypatch.setenv("DB_HOST", "db.internal")
    assert expand_env("postgresql://${DB_HOST}:5432/users") == "postgresql://db.internal:5432/users"


def test_expand_env_prefixed_variable(monkeypatch) -> None:
    monkeypatch.setenv("DB_PASSWORD", "s3cret")
    assert expand_env("${env.DB_PASSWORD}") == "s3cret"


def test_unset_variable_is_left_untouched(monkeypatch) -> None:
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
    assert expand_env("${NOT_SET_ANYWHERE}") == "${NOT_SET_ANYWHERE}"


def test_default_value(monkeypatch) -> None:
    monkeypatch.delenv("DB_USER", raising=False)
    assert expand_env("${DB_USER:-postgres}") == "postgres"
    monkeypatch.setenv("DB_USER", "app")
    assert expand_env("${DB_USER:-postgres}") == "app"


def test_reserved_names_are_not_expanded(monkeypatch) -> None:
    monkeypatch.setenv("username", "root")
    assert expand_env("where username = '${username}'", {"username"}) == "where username = '${username}'"
    assert expand_env("where username = '${username}'") == "where username = 'root'"


def test_none_passes_through() -> None:
    assert expand_env(None) is None
