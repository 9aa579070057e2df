import pytest
from sqlalchemy import create_engine, text

from sql_user_storage.database import close_connection, open_connection
from sql_user_storage.factory import DatabaseUserStorageProviderFactory
from sql_user_storage.models import ComponentModel

SQL_TEMPLATE = "select username from users where username = '${username}'"

USERS = [
    {"username": "alice", "email": "alice@example.com"},
    {"username": "bob", "email": "bob@example.com"},
    {"username": "carol", "email": "carol@example.com"},
]


def get_component(url: str, /, sql_template: str = SQL_TEMPLATE, **overrides) -> ComponentModel:
    config = {
        "url": url,
        "username": "sa",
        "password": "secret",
        "sql_template": sql_template,
    }
    config.update(overrides)
    return ComponentModel(id="users-db", config=config)


@pytest.fixture
def users_db(tmp_path):
    db_path = tmp_path / "users.db"
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as connection:
        connection.execute(text("create table users (username varchar(64) primary key, email varchar(128))"))
        connection.execute(text("insert into users (username, email) values (:username, :email)"), USERS)
    engine.dispose()
    return f"sqlite:///{db_path}"


@pytest.fixture
def connection(users_db):
    connection = open_connection(users_db, "sa", "secret")
    yield connection
    close_connection(connection)


@pytest.fixture
def component(users_db):
    return get_component(users_db)


@pytest.fixture
def factory():
    return DatabaseUserStorageProviderFactory()


@pytest.fixture
def provider(factory, component):
    provider = factory.create(None, component)
    yield provider
    provider.close()
