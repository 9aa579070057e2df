"""Compile administrator SQL templates into bound-parameter statements."""
import re
from typing import Any

from sqlalchemy import Connection, TextClause, text

from sql_user_storage.exceptions import TemplateError

PLACEHOLDER_PATTERN = re.compile(r"\$\{(\w+)\}")
# Comments and quoted text; a doubled quote escapes itself
SEGMENT_PATTERN = re.compile(
    r"--[^\n]*"
    r"|/\*.*?\*/"
    r"|'(?:[^']|'')*'"
    r'|"(?:[^"]|"")*"',
    re.DOTALL,
)
COMMENT_PREFIXES = ("--", "/*")

RESULT_COLUMN = "username"


class TemplateQuery:

    """A SQL template whose ${name} placeholders are executed as bound parameters.

    The administrator writes ``select username from users where username = '${username}'``;
    the placeholder, together with its surrounding quotes, is replaced by the bind
    parameter ``:username`` so the searched value never becomes part of the SQL text.
    """

    def __init__(self, template: str) -> None:
        if not template or not template.strip():
            raise TemplateError("SQL template is empty.")
        self.template = template
        self.parameter_names: set[str] = set()
        self._statement: TextClause = text(self._compile(template))

    def _compile(self, template: str) -> str:
        parts: list[str] = []
        position = 0
        for segment in SEGMENT_PATTERN.finditer(template):
            parts.append(self._bind_placeholders(template[position:segment.start()]))
            if segment.group(0).startswith(COMMENT_PREFIXES):
                parts.append(_escape_colons(segment.group(0)))
            else:
                parts.append(self._compile_literal(segment.group(0)))
            position = segment.end()
        parts.append(self._bind_placeholders(template[position:]))
        return "".join(parts)

    def _compile_literal(self, literal: str) -> str:
        inner = literal[1:-1]
        placeholder = PLACEHOLDER_PATTERN.fullmatch(inner)
        if placeholder:
            self.parameter_names.add(placeholder.group(1))
            return f":{placeholder.group(1)}"
        if PLACEHOLDER_PATTERN.search(inner):
            raise TemplateError(
                f"Placeholder must be the whole quoted value, not part of it: {literal}",
            )
        return _escape_colons(literal)

    def _bind_placeholders(self, fragment: str) -> str:
        parts: list[str] = []
        position = 0
        for placeholder in PLACEHOLDER_PATTERN.finditer(fragment):
            parts.append(_escape_colons(fragment[position:placeholder.start()]))
            self.parameter_names.add(placeholder.group(1))
            parts.append(f":{placeholder.group(1)}")
            position = placeholder.end()
        parts.append(_escape_colons(fragment[position:]))
        return "".join(parts)

    def execute_scalar(self, connection: Connection, params: dict[str, Any]) -> str | None:
        """Execute the statement and return the first row's username column.

        Args:
            connection (Connection): Open connection to run the statement on.
            params (dict[str, Any]): Values for the template placeholders.

        Returns:
            str | None: The value of the username column (or the first column) of
                the first row, None if no row matched.

        """
        missing = self.parameter_names - params.keys()
        if missing:
            raise TemplateError(f"Missing values for placeholders: {', '.join(sorted(missing))}")

        bound = {name: params[name] for name in self.parameter_names}
        with connection.begin():
            row = connection.execute(self._statement, bound).first()

        if row is None:
            return None
        mapping = row._mapping
        value = mapping[RESULT_COLUMN] if RESULT_COLUMN in mapping else row[0]
        return None if value is None else str(value)

    def __repr__(self) -> str:
        return f"TemplateQuery({self.template!r})"


def _escape_colons(fragment: str) -> str:
    # Literal colons must not be read as bind parameters by text()
    return fragment.replace(":", r"\:")
