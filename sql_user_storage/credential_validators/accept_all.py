from sql_user_storage.credential_validators.base import CredentialValidator
from sql_user_storage.models import CredentialInput, Identity, RealmRef


class AcceptAllCredentialValidator(CredentialValidator):
    def validate(self, realm: RealmRef | None, user: Identity, credential: CredentialInput) -> bool:
        """Accept any credential for any user.

        Args:
            realm (RealmRef | None): Realm the authentication runs in.
            user (Identity): User the credential was presented for.
            credential (CredentialInput): The presented credential.

        Returns:
            bool: Always True.

        """
        # Implement real verification in a dedicated validator
        return True
