"""Module to get credential validator instances by name."""
from sql_user_storage.credential_validators.accept_all import AcceptAllCredentialValidator
from sql_user_storage.credential_validators.base import CredentialValidator
from sql_user_storage.credential_validators.reject_all import RejectAllCredentialValidator

DEFAULT_CREDENTIAL_VALIDATOR = "accept-all"


def get_credential_validator(name: str = DEFAULT_CREDENTIAL_VALIDATOR) -> CredentialValidator:
    """Get a credential validator instance by name.

    Args:
        name (str): Name of the credential validator (accept-all, reject-all).

    Returns:
        CredentialValidator: Instance of the requested validator.

    """
    if name == "accept-all":
        return AcceptAllCredentialValidator()
    elif name == "reject-all":
        return RejectAllCredentialValidator()
    else:
        return AcceptAllCredentialValidator()
