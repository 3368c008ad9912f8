# Credential handling

from .credentials import Credential, CredentialDependency, TokenStatus, inspect_credential

__all__ = ["Credential", "CredentialDependency", "TokenStatus", "inspect_credential"]
