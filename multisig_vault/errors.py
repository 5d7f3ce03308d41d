"""
Error types for the multisig vault engine.

Every failure the engine reports is a ``VaultError`` subclass carrying a
stable ``code`` (the logical error kind) and a readable message. Checks run
before any mutation, so a raised error always means the operation had no
effect.

Hierarchy
---------
VaultError
 ├─ InvalidThreshold
 ├─ InvalidOwners
 ├─ TooManyOwners
 ├─ DuplicateOwner
 ├─ VaultAlreadyExists
 ├─ Unauthorized
 ├─ AlreadyApproved
 ├─ InsufficientApprovals
 ├─ AlreadyExecuted
 ├─ InvalidVault
 │   └─ InsufficientFunds
 ├─ InvalidProposal
 ├─ InvalidDestination
 ├─ InvalidAmount
 ├─ AccountNotFound
 ├─ AccountExists
 └─ InvalidSignature
"""

from typing import Optional


class VaultError(Exception):
    """Base class for engine errors."""

    code: str = "VaultError"
    default_message: str = "Vault error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {'code': self.code, 'error': self.message}


class InvalidThreshold(VaultError):
    code = "InvalidThreshold"
    default_message = "Invalid threshold"


class InvalidOwners(VaultError):
    code = "InvalidOwners"
    default_message = "Owners must be a list of identity strings"


class TooManyOwners(VaultError):
    code = "TooManyOwners"
    default_message = "Too many owners"


class DuplicateOwner(VaultError):
    code = "DuplicateOwner"
    default_message = "Duplicate owner"


class VaultAlreadyExists(VaultError):
    code = "VaultAlreadyExists"
    default_message = "Vault already exists"


class Unauthorized(VaultError):
    """Signer is not in the vault's owner set."""

    code = "Unauthorized"
    default_message = "Signer is not an owner"


class AlreadyApproved(VaultError):
    code = "AlreadyApproved"
    default_message = "Proposal already approved"


class InsufficientApprovals(VaultError):
    code = "InsufficientApprovals"
    default_message = "Not enough approvals"


class AlreadyExecuted(VaultError):
    """Proposal is resolved (executed or cancelled)."""

    code = "AlreadyExecuted"
    default_message = "Proposal already executed"


class InvalidVault(VaultError):
    """Vault account is missing, spoofed, or cannot back the operation."""

    code = "InvalidVault"
    default_message = "InvalidVault"


class InsufficientFunds(InvalidVault):
    code = "InsufficientFunds"
    default_message = "InvalidVault: insufficient funds"

    def __init__(self, message: Optional[str] = None, *,
                 required: Optional[int] = None,
                 available: Optional[int] = None) -> None:
        if message is None and required is not None and available is not None:
            message = f"InvalidVault: insufficient funds (need {required}, have {available})"
        super().__init__(message)
        self.required = required
        self.available = available


class InvalidProposal(VaultError):
    code = "InvalidProposal"
    default_message = "Invalid proposal"


class InvalidDestination(VaultError):
    code = "InvalidDestination"
    default_message = "Destination does not match proposal"


class InvalidAmount(VaultError):
    code = "InvalidAmount"
    default_message = "Amount must be greater than zero"


class AccountNotFound(VaultError):
    code = "AccountNotFound"
    default_message = "Account not found"


class AccountExists(VaultError):
    code = "AccountExists"
    default_message = "Account already exists"


class InvalidSignature(VaultError):
    code = "InvalidSignature"
    default_message = "Invalid signature"
