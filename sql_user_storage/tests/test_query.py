import pytest

from sql_user_storage.exceptions import TemplateError
from sql_user_storage.query import TemplateQuery

from sql_user_storage.tests.fixtures import (
    SQL_TEMPLATE,
    connection,
    users_db,
)


def test_quoted_placeholder_becomes_bind_parameter() -> None:
    query = TemplateQuery(SQL_TEMPLATE)
    assert query.parameter_names == {"username"}
    assert str(query._statement) == "select username from users where username = :username"


def test_bare_placeholder_becomes_bind_parameter() -> None:
    query = TemplateQuery("select username from users where username = ${username}")
    assert query.parameter_names == {"username"}
    assert str(query._statement) == "select username from users where username = :username"


@pytest.mark.parametrize("template", ["", "   "])
def test_empty_template(template) -> None:
    with pytest.raises(TemplateError, match="empty"):
        TemplateQuery(template)


def test_placeholder_inside_larger_literal() -> None:
    with pytest.raises(TemplateError, match="whole quoted value"):
        TemplateQuery("select username from users where username like '${username}%'")


def test_execute_scalar_found(connection) -> None:
    query = TemplateQuery(SQL_TEMPLATE)
    assert query.execute_scalar(connection, {"username": "alice"}) == "alice"


def test_execute_scalar_no_row(connection) -> None:
    query = TemplateQuery(SQL_TEMPLATE)
    assert query.execute_scalar(connection, {"username": "mallory"}) is None


def test_execute_scalar_falls_back_to_first_column(connection) -> None:
    query = TemplateQuery("select email, username from users where username = '${username}'")
    assert query.execute_scalar(connection, {"username": "bob"}) == "bob"
    query = TemplateQuery("select email from users where username = '${username}'")
    assert query.execute_scalar(connection, {"username": "bob"}) == "bob@example.com"


def test_execute_scalar_keeps_literal_colons(connection) -> None:
    query = TemplateQuery("select 'user:' || username as username from users where username = '${username}'")
    assert query.parameter_names == {"username"}
    assert query.execute_scalar(connection, {"username": "carol"}) == "user:carol"


def test_execute_scalar_escaped_quotes_in_literal(connection) -> None:
    query = TemplateQuery("select 'o''brien' as username from users where username = '${username}'")
    assert query.execute_scalar(connection, {"username": "alice"}) == "o'brien"


def test_execute_scalar_does_not_splice_value(connection) -> None:
    query = TemplateQuery(SQL_TEMPLATE)
    assert query.execute_scalar(connection, {"username": "alice' or '1'='1"}) is None


def test_execute_scalar_missing_parameter(connection) -> None:
    query = TemplateQuery(SQL_TEMPLATE)
    with pytest.raises(TemplateError, match="username"):
        query.execute_scalar(connection, {})


def test_execute_scalar_ends_transaction(connection) -> None:
    query = TemplateQuery(SQL_TEMPLATE)
    query.execute_scalar(connection, {"username": "alice"})
    assert not connection.in_transaction()
    with pytest.raises(Exception):
        TemplateQuery("select username from no_such_table where username = '${username}'").execute_scalar(
            connection, {"username": "alice"},
        )
    assert not connection.in_transaction()


def test_line_comment_with_apostrophe(connection) -> None:
    query = TemplateQuery("select username from users -- user's table\nwhere username = '${username}'")
    assert query.parameter_names == {"username"}
    assert query.execute_scalar(connection, {"username": "alice"}) == "alice"


def test_block_comment_with_apostrophe(connection) -> None:
    query = TemplateQuery("select username /* the user's name */ from users where username = '${username}'")
    assert query.execute_scalar(connection, {"username": "bob"}) == "bob"


def test_placeholder_in_comment_is_not_bound(connection) -> None:
    query = TemplateQuery("select username from users -- ${realm}: ignored\nwhere username = '${username}'")
    assert query.parameter_names == {"username"}
    assert query.execute_scalar(connection, {"username": "carol"}) == "carol"


def test_double_quoted_placeholder_becomes_bind_parameter(connection) -> None:
    query = TemplateQuery('select "username" from users where "username" = "${username}"')
    assert query.parameter_names == {"username"}
    assert str(query._statement) == 'select "username" from users where "username" = :username'
    assert query.execute_scalar(connection, {"username": "alice"}) == "alice"


def test_placeholder_inside_larger_double_quoted_text() -> None:
    with pytest.raises(TemplateError, match="whole quoted value"):
        TemplateQuery('select username from users where username = "${username}-suffix"')
