"""Models shared by the provider, its factory, and the host-facing shapes they exchange."""

import os
from enum import Enum
from typing import Self

import jinja2
import yaml
from pydantic import BaseModel, ConfigDict, Field


class _ConfigParser:
    @classmethod
    def parse_config(cls: type[BaseModel], config_path: str, enable_jinja: bool = False) -> BaseModel:
        """Parse a YAML config file and instantiate the model.

        Args:
            config_path (str): Path to YAML config file.
            enable_jinja (bool): Render the file as a Jinja template before parsing.

        Returns:
            BaseModel: Instantiated model from config.

        """
        try:
            with open(config_path) as f:
                content = f.read()
            return cls.parse_config_string(content, enable_jinja=enable_jinja)
        except Exception as e:
            raise ValueError(f"Error parsing config file {config_path}.") from e

    @classmethod
    def parse_config_string(cls: type[BaseModel], config: str, enable_jinja: bool = False) -> BaseModel:
        """Parse a YAML config string and instantiate the model.

        Args:
            config (str): YAML config string.
            enable_jinja (bool): Render the string as a Jinja template before parsing.
                The process environment is available as ``env``.

        Returns:
            BaseModel: Instantiated model from config string.

        """
        try:
            if enable_jinja:
                environment = jinja2.Environment(undefined=jinja2.StrictUndefined)
                config = environment.from_string(config).render(env=dict(os.environ))
            loaded = yaml.safe_load(config)
            return cls(**loaded)
        except Exception as e:
            raise ValueError(f"Error parsing config string: {config}") from e


class ConfigPropertyType(str, Enum):

    """Value types understood by the host's configuration UI."""

    STRING = "String"


class ConfigProperty(BaseModel):

    """Metadata describing one provider configuration field."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    type: ConfigPropertyType = ConfigPropertyType.STRING
    help_text: str | None = None
    default_value: str | None = None


class ComponentModel(_ConfigParser, BaseModel):

    """Provider instance configuration as persisted by the host.

    Config values are stored raw, environment references included, and may be
    multivalued the way the host stores them.
    """

    id: str
    name: str = "sql-user-storage"
    provider_id: str = "database-user-storage"
    config: dict[str, list[str] | str | None] = Field(default_factory=dict)

    def get_first(self, key: str) -> str | None:
        """Get the first configured value for a key.

        Args:
            key (str): Config key.

        Returns:
            str | None: The first value, or None if the key is absent or empty.

        """
        value = self.config.get(key)
        if isinstance(value, list):
            return value[0] if value else None
        return value


class ProviderConfig(BaseModel):

    """Resolved provider configuration: every value present and environment-expanded."""

    model_config = ConfigDict(frozen=True)

    url: str
    username: str
    password: str = Field(repr=False)
    sql_template: str


class RealmRef(BaseModel):

    """Reference to the host realm an operation runs in."""

    id: str
    name: str | None = None


class SessionContext(BaseModel):

    """Host session a provider instance is scoped to."""

    id: str | None = None
    realm: RealmRef | None = None


class CredentialInput(BaseModel):

    """Credential presented to the authentication pipeline."""

    type: str
    value: str | None = Field(default=None, repr=False)


class StorageId(BaseModel):

    """Cross-provider user address of the form ``<provider_id>:<external_id>``."""

    model_config = ConfigDict(frozen=True)

    provider_id: str | None
    external_id: str

    @classmethod
    def parse(cls, storage_id: str) -> Self:
        """Parse a storage id.

        The host's federated form ``f:<provider_id>:<external_id>`` is accepted too.
        An id without a provider segment is a bare external id.

        Args:
            storage_id (str): Storage id string.

        Returns:
            StorageId: Parsed storage id.

        """
        if storage_id.startswith("f:") and storage_id.count(":") >= 2:
            storage_id = storage_id[2:]
        provider_id, separator, external_id = storage_id.partition(":")
        if not separator:
            return cls(provider_id=None, external_id=storage_id)
        return cls(provider_id=provider_id, external_id=external_id)

    def __str__(self) -> str:
        if self.provider_id is None:
            return self.external_id
        return f"{self.provider_id}:{self.external_id}"


class Identity(BaseModel):

    """A user resolved from the backing store."""

    model_config = ConfigDict(frozen=True)

    storage_id: StorageId

    @classmethod
    def for_username(cls, provider_id: str, username: str) -> Self:
        return cls(storage_id=StorageId(provider_id=provider_id, external_id=username))

    @property
    def id(self) -> str:
        return str(self.storage_id)

    @property
    def username(self) -> str:
        return self.storage_id.external_id
