"""Environment variable expansion for provider configuration values."""
import os
import re

ENV_REFERENCE_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env(value: str | None, reserved: frozenset[str] | set[str] = frozenset()) -> str | None:
    """Expand environment references in a configuration value.

    Supports formats:
    - ${VAR} - replaced when VAR is set, left untouched otherwise
    - ${env.VAR} - same as ${VAR}
    - ${VAR:-default} - replaced by default when VAR is unset

    Args:
        value (str | None): Raw configuration value.
        reserved (set[str]): Names that are never expanded, e.g. query placeholders.

    Returns:
        str | None: The expanded value, or the input unchanged if it is None.

    """
    if value is None:
        return None

    def replacer(match: re.Match) -> str:
        expression = match.group(1)
        default = None
        if ":-" in expression:
            expression, default = expression.split(":-", 1)
        name = expression.removeprefix("env.")
        if expression in reserved or name in reserved:
            return match.group(0)
        resolved = os.getenv(name)
        if resolved is not None:
            return resolved
        if default is not None:
            return default
        return match.group(0)

    return ENV_REFERENCE_PATTERN.sub(replacer, value)
