"""User storage provider that resolves users with an administrator-defined SQL query."""
import logging
from types import TracebackType
from typing import Self

from sqlalchemy import Connection

from sql_user_storage.cache import IdentityCache
from sql_user_storage.credential_validators.base import CredentialValidator
from sql_user_storage.credential_validators.main import get_credential_validator
from sql_user_storage.database import close_connection
from sql_user_storage.exceptions import ReadOnlyError
from sql_user_storage.models import ComponentModel, CredentialInput, Identity, RealmRef, SessionContext, StorageId
from sql_user_storage.query import TemplateQuery

logger = logging.getLogger(__name__)

USERNAME_PARAM = "username"


class DatabaseUserStorageProvider:

    """Session-scoped provider owning one database connection.

    Users found by a lookup are not cached. Only users whose credentials were
    accepted by ``is_valid`` are cached, and later lookups for them are answered
    without querying the database.
    """

    def __init__(  # noqa: PLR0913
        self,
        session: SessionContext | None,
        model: ComponentModel,
        connection: Connection,
        query: TemplateQuery,
        credential_validator: CredentialValidator | None = None,
    ) -> None:
        self.session = session
        self.model = model
        self.connection = connection
        self.query = query
        self.credential_validator = credential_validator or get_credential_validator()
        self.login_user_cache = IdentityCache()

    def get_user_by_id(self, user_id: str, realm: RealmRef | None = None) -> Identity | None:
        """Find a user by storage id.

        Args:
            user_id (str): Storage id produced by this provider, ``<provider_id>:<username>``.
            realm (RealmRef | None): Realm of the lookup.

        Returns:
            Identity | None: The user, or None if not found.

        """
        storage_id = StorageId.parse(user_id)
        return self.get_user_by_username(storage_id.external_id, realm)

    def get_user_by_username(self, username: str, realm: RealmRef | None = None) -> Identity | None:
        """Find a user by username.

        Users cached by a successful credential validation are returned without a
        query. Otherwise the SQL template is executed with ``username`` bound to
        the searched value. Query failures are logged and reported as not found.

        Args:
            username (str): Username to look up.
            realm (RealmRef | None): Realm of the lookup.

        Returns:
            Identity | None: The user, or None if not found or the query failed.

        """
        cached = self.login_user_cache.get(username)
        if cached is not None:
            return cached

        try:
            name = self.query.execute_scalar(self.connection, {USERNAME_PARAM: username})
        except Exception as e:
            if logger.isEnabledFor(logging.DEBUG):
                logger.warning(f"Unable to search for '{username}'", exc_info=e)
            else:
                logger.warning(f"Unable to search for '{username}'")
            return None

        if name is None or not name.strip():
            return None
        return self.create_adapter(name, realm)

    def create_adapter(self, username: str, realm: RealmRef | None) -> Identity:  # noqa: ARG002
        """Create the identity handed to the host for a username found in the store."""
        return Identity.for_username(self.model.id, username)

    def get_user_by_email(self, email: str, realm: RealmRef | None = None) -> Identity | None:  # noqa: ARG002
        # Email lookup is not supported by the template contract
        return None

    def is_configured_for(self, realm: RealmRef | None, user: Identity, credential_type: str) -> bool:  # noqa: ARG002
        return True

    def is_valid(self, realm: RealmRef | None, user: Identity, credential_input: CredentialInput) -> bool:
        """Validate a credential and remember the user on success.

        Args:
            realm (RealmRef | None): Realm the authentication runs in.
            user (Identity): User the credential was presented for.
            credential_input (CredentialInput): The presented credential.

        Returns:
            bool: Verdict of the configured credential validator.

        """
        valid = self.credential_validator.validate(realm, user, credential_input)
        if valid:
            self.login_user_cache.put(user)
            logger.debug(f"Credential accepted for {user.username}")
        return valid

    def update_credential(self, realm: RealmRef | None, user: Identity, credential_input: CredentialInput) -> bool:
        raise ReadOnlyError("User is read only for this update")

    def disable_credential_type(self, realm: RealmRef | None, user: Identity, credential_type: str) -> None:
        pass

    def supports_credential_type(self, credential_type: str) -> bool:
        return self.credential_validator.supports(credential_type)

    def get_disableable_credential_types(self, realm: RealmRef | None, user: Identity) -> set[str]:  # noqa: ARG002
        return set()

    def close(self) -> None:
        """Release the connection. Never raises."""
        try:
            close_connection(self.connection)
        except Exception as e:
            logger.debug(f"Ignoring error while closing connection: {e!s}")
        self.login_user_cache.clear()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
