from sql_user_storage.credential_validators.base import CredentialValidator
from sql_user_storage.models import CredentialInput, Identity, RealmRef


class RejectAllCredentialValidator(CredentialValidator):

    """Refuses every credential, locking out all users of the store."""

    def validate(self, realm: RealmRef | None, user: Identity, credential: CredentialInput) -> bool:
        return False
