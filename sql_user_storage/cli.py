"""Entry point for the SQL user storage CLI using Typer."""
import logging

import typer
import yaml

from sql_user_storage.exceptions import ComponentValidationError, ProviderCreationError
from sql_user_storage.factory import DatabaseUserStorageProviderFactory
from sql_user_storage.models import ComponentModel

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

typer_app = typer.Typer()

CONFIG_FILE_OPTION = typer.Option(
    ...,
    "--config",
    "-c",
    help="Provider component config file",
    envvar="SQL_USER_STORAGE_CONFIG",
)
ENABLE_CONFIG_JINJA_OPTION = typer.Option(
    False,
    help="Enable Jinja templating in the config file",
    envvar="ENABLE_CONFIG_JINJA",
)
DEBUG_OPTION = typer.Option(False, help="Enable debug logging", envvar="DEBUG")


def _load_component(config_file: str, enable_config_jinja: bool) -> ComponentModel:
    try:
        component = ComponentModel.parse_config(config_file, enable_jinja=enable_config_jinja)
    except ValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    logger.info(f"Component config loaded from {config_file}: {component.id}")
    return component


def _set_debug(debug: bool) -> None:
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)


@typer_app.command()
def properties() -> None:
    """Print the configuration fields the provider accepts."""
    factory = DatabaseUserStorageProviderFactory()
    fields = [prop.model_dump(mode="json") for prop in factory.get_config_properties()]
    typer.echo(yaml.safe_dump(fields, sort_keys=False, allow_unicode=True))


@typer_app.command()
def validate(
    config_file: str = CONFIG_FILE_OPTION,
    enable_config_jinja: bool = ENABLE_CONFIG_JINJA_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Validate a provider configuration, including a connection to the database.

    Args:
        config_file (str): Path to the component config YAML file.
        enable_config_jinja (bool): Enable Jinja templating in the config file.
        debug (bool): Enable debug logging.

    """
    _set_debug(debug)
    component = _load_component(config_file, enable_config_jinja)
    try:
        DatabaseUserStorageProviderFactory().validate_configuration(None, None, component)
    except ComponentValidationError as e:
        typer.echo(f"Invalid configuration: {e!s}", err=True)
        raise typer.Exit(code=1) from e
    typer.echo("Configuration is valid")


@typer_app.command()
def lookup(
    username: str = typer.Argument(..., help="Username to look up"),
    config_file: str = CONFIG_FILE_OPTION,
    enable_config_jinja: bool = ENABLE_CONFIG_JINJA_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Look a user up through a provider created from the config file.

    Prints the user's storage id, or exits with status 1 if the user is not found.

    Args:
        username (str): Username to look up.
        config_file (str): Path to the component config YAML file.
        enable_config_jinja (bool): Enable Jinja templating in the config file.
        debug (bool): Enable debug logging.

    """
    _set_debug(debug)
    component = _load_component(config_file, enable_config_jinja)
    try:
        provider = DatabaseUserStorageProviderFactory().create(None, component)
    except ProviderCreationError as e:
        typer.echo(f"{e!s}: {e.__cause__!s}", err=True)
        raise typer.Exit(code=1) from e

    with provider:
        user = provider.get_user_by_username(username)

    if user is None:
        typer.echo(f"User not found: {username}", err=True)
        raise typer.Exit(code=1)
    typer.echo(user.id)


if __name__ == "__main__":
    typer_app()
