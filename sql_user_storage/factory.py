"""Factory validating provider configuration and creating database user storage providers."""
import logging

from sql_user_storage.credential_validators.main import DEFAULT_CREDENTIAL_VALIDATOR, get_credential_validator
from sql_user_storage.database import close_connection, open_connection
from sql_user_storage.env import expand_env
from sql_user_storage.exceptions import ComponentValidationError, ProviderCreationError, TemplateError
from sql_user_storage.models import ComponentModel, ConfigProperty, ProviderConfig, RealmRef, SessionContext
from sql_user_storage.provider import USERNAME_PARAM, DatabaseUserStorageProvider
from sql_user_storage.query import TemplateQuery

logger = logging.getLogger(__name__)

PROVIDER_ID = "database-user-storage"

CONFIG_URL = "url"
CONFIG_USERNAME = "username"
CONFIG_PASSWORD = "password"
CONFIG_SQL = "sql_template"

CONFIG_PROPERTIES: list[ConfigProperty] = [
    ConfigProperty(
        name=CONFIG_URL,
        label="Url",
        help_text="Database connection URL",
        default_value="postgresql://localhost:5432/postgres",
    ),
    ConfigProperty(
        name=CONFIG_USERNAME,
        label="Username",
        help_text="Database connection user",
        default_value="postgres",
    ),
    ConfigProperty(
        name=CONFIG_PASSWORD,
        label="Password",
        help_text="Database connection password",
        default_value="postgres",
    ),
    ConfigProperty(
        name=CONFIG_SQL,
        label="Sql",
        help_text="SQL to find a user\n${username} is replaced by the searched username",
        default_value="select usename as username from pg_user where usename = '${username}'",
    ),
]


class DatabaseUserStorageProviderFactory:

    """Creates providers that look users up in a relational database."""

    def __init__(self, credential_validator: str = DEFAULT_CREDENTIAL_VALIDATOR) -> None:
        self.credential_validator = get_credential_validator(credential_validator)

    def get_id(self) -> str:
        return PROVIDER_ID

    def get_config_properties(self) -> list[ConfigProperty]:
        return list(CONFIG_PROPERTIES)

    def resolve_config(self, model: ComponentModel) -> ProviderConfig:
        """Read every required config value, expanding environment references.

        Args:
            model (ComponentModel): Persisted provider configuration.

        Returns:
            ProviderConfig: Expanded configuration.

        Raises:
            ComponentValidationError: If a value is missing or blank.

        """
        return ProviderConfig(
            url=self._required_value(model, CONFIG_URL),
            username=self._required_value(model, CONFIG_USERNAME),
            password=self._required_value(model, CONFIG_PASSWORD),
            sql_template=self._required_value(model, CONFIG_SQL, reserved={USERNAME_PARAM}),
        )

    def validate_configuration(
        self,
        session: SessionContext | None,
        realm: RealmRef | None,
        model: ComponentModel,
    ) -> None:
        """Check the configuration and that the database can be reached.

        The probe connection is closed before returning.

        Args:
            session (SessionContext | None): Host session.
            realm (RealmRef | None): Realm the provider is configured in.
            model (ComponentModel): Persisted provider configuration.

        Raises:
            ComponentValidationError: If a value is missing, the SQL template is
                unusable, or the connection is refused.

        """
        config = self.resolve_config(model)
        self._compile_template(config.sql_template)
        self._test_connection(config)

    def create(self, session: SessionContext | None, model: ComponentModel) -> DatabaseUserStorageProvider:
        """Create a provider holding a new connection to the configured database.

        Args:
            session (SessionContext | None): Host session the provider is scoped to.
            model (ComponentModel): Persisted provider configuration.

        Returns:
            DatabaseUserStorageProvider: Provider owning the new connection.

        Raises:
            ProviderCreationError: If the configuration is unusable or the
                database cannot be reached.

        """
        try:
            config = self.resolve_config(model)
            query = self._compile_template(config.sql_template)
            connection = open_connection(config.url, config.username, config.password)
        except Exception as e:
            raise ProviderCreationError(f"Unable to create provider {model.id}") from e

        return DatabaseUserStorageProvider(
            session,
            model,
            connection,
            query,
            credential_validator=self.credential_validator,
        )

    def _required_value(self, model: ComponentModel, key: str, reserved: set[str] | None = None) -> str:
        value = expand_env(model.get_first(key), reserved or set())
        if value is None or not value.strip():
            raise ComponentValidationError(f"{key} is required.")
        return value

    def _compile_template(self, sql_template: str) -> TemplateQuery:
        try:
            query = TemplateQuery(sql_template)
        except TemplateError as e:
            raise ComponentValidationError(f"{CONFIG_SQL} is invalid: {e!s}") from e
        if USERNAME_PARAM not in query.parameter_names:
            raise ComponentValidationError(f"{CONFIG_SQL} must contain ${{{USERNAME_PARAM}}}.")
        unknown = query.parameter_names - {USERNAME_PARAM}
        if unknown:
            raise ComponentValidationError(
                f"{CONFIG_SQL} contains unknown placeholders: {', '.join(sorted(unknown))}",
            )
        return query

    def _test_connection(self, config: ProviderConfig) -> None:
        try:
            connection = open_connection(config.url, config.username, config.password)
        except Exception as e:
            logger.error("Connection refused.", exc_info=e)
            raise ComponentValidationError("Connection refused.") from e
        try:
            close_connection(connection)
        except Exception as e:
            logger.debug(f"Ignoring error while closing probe connection: {e!s}")
        logger.debug(f"Connection probe succeeded: username={config.username}")
