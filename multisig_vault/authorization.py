"""
Authorization checks.

Each check raises the matching ``VaultError`` and never mutates state, so the
engine can run all of them before touching the ledger.
"""

from typing import Sequence

from .errors import (
    AlreadyApproved,
    AlreadyExecuted,
    DuplicateOwner,
    InsufficientApprovals,
    InsufficientFunds,
    InvalidAmount,
    InvalidDestination,
    InvalidOwners,
    InvalidProposal,
    InvalidThreshold,
    TooManyOwners,
    Unauthorized,
)
from .vault import Proposal, Vault


def validate_vault_params(owners: Sequence[str], threshold: int, max_owners: int) -> None:
    """Owner set must be 1..max_owners distinct identities, 1 <= threshold <= len"""
    if not isinstance(owners, (list, tuple)):
        raise InvalidOwners()
    if not all(isinstance(owner, str) and owner for owner in owners):
        raise InvalidOwners()
    if len(owners) > max_owners:
        raise TooManyOwners(f"Too many owners: {len(owners)} > {max_owners}")
    if len(set(owners)) != len(owners):
        raise DuplicateOwner()
    if not isinstance(threshold, int) or isinstance(threshold, bool):
        raise InvalidThreshold()
    if not owners or threshold < 1 or threshold > len(owners):
        raise InvalidThreshold(f"Invalid threshold: {threshold} of {len(owners)} owners")


def require_owner(vault: Vault, signer: str) -> None:
    if not vault.is_owner(signer):
        raise Unauthorized()


def require_in_vault(vault: Vault, proposal: Proposal) -> None:
    if proposal.vault != vault.address:
        raise InvalidProposal("Proposal does not belong to this vault")


def require_pending(proposal: Proposal) -> None:
    if proposal.resolved:
        raise AlreadyExecuted()


def require_not_approved(proposal: Proposal, signer: str) -> None:
    if proposal.has_approved(signer):
        raise AlreadyApproved()


def require_threshold(vault: Vault, proposal: Proposal) -> None:
    if proposal.approval_count < vault.threshold:
        raise InsufficientApprovals(
            f"Not enough approvals: {proposal.approval_count} of {vault.threshold}"
        )


def require_destination(proposal: Proposal, destination: str) -> None:
    if destination != proposal.destination:
        raise InvalidDestination()


def require_positive_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidAmount()


def require_funds(proposal: Proposal, available: int) -> None:
    if available < proposal.amount:
        raise InsufficientFunds(required=proposal.amount, available=available)


def check_approval(vault: Vault, proposal: Proposal, signer: str) -> None:
    require_owner(vault, signer)
    require_pending(proposal)
    require_not_approved(proposal, signer)


def check_execution(vault: Vault, proposal: Proposal, destination: str, available: int) -> None:
    """Execution gate: pending, threshold met, destination bound, funds present"""
    require_pending(proposal)
    require_threshold(vault, proposal)
    require_destination(proposal, destination)
    require_funds(proposal, available)


def check_cancellation(vault: Vault, proposal: Proposal, canceller: str) -> None:
    require_owner(vault, canceller)
    require_pending(proposal)
