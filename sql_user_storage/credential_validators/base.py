from sql_user_storage.models import CredentialInput, Identity, RealmRef


class CredentialValidator:
    def validate(self, realm: RealmRef | None, user: Identity, credential: CredentialInput) -> bool:
        """Check the credential presented for a user.

        Args:
            realm (RealmRef | None): Realm the authentication runs in.
            user (Identity): User the credential was presented for.
            credential (CredentialInput): The presented credential.

        Returns:
            bool: True if the credential is accepted.

        """
        raise NotImplementedError

    def supports(self, credential_type: str) -> bool:  # noqa: ARG002
        """Whether this validator can check credentials of the given type."""
        return True
