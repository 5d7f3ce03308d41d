"""
Threshold-authorization engine.

``MultisigProgram`` is the only component that mutates vaults and proposals.
Each public operation loads the accounts it needs, re-derives their
addresses, runs every check, and only then writes, all inside one ledger
transaction:

    create_vault -> [deposit]* -> create_proposal -> approve* -> execute
                                               └──────────────> cancel_proposal

Signer identities are passed in already authenticated; the engine only checks
owner-set membership.
"""

import logging
from typing import List, Optional, Sequence

from . import authorization
from .addressing import (
    find_program_address,
    proposal_seeds,
    vault_seeds,
    verify_program_address,
)
from .config import VaultSettings
from .errors import (
    AccountNotFound,
    InvalidProposal,
    InvalidVault,
    VaultAlreadyExists,
    VaultError,
)
from .ledger import Ledger
from .vault import Proposal, ProposalStatus, Vault

logger = logging.getLogger(__name__)

VAULT_KIND = "vault"
PROPOSAL_KIND = "proposal"


def _short(address: str) -> str:
    return f"{address[:8]}..."


class MultisigProgram:
    """K-of-N custody over a single fungible unit"""

    def __init__(self, ledger: Optional[Ledger] = None, settings: Optional[VaultSettings] = None):
        self.settings = settings or VaultSettings()
        self.ledger = ledger or Ledger(min_retained_balance=self.settings.min_retained_balance)
        self.program_id = self.settings.program_id

    # Addressing

    def derive_vault_address(self, creator: str) -> tuple:
        return find_program_address(vault_seeds(creator), self.program_id)

    def derive_proposal_address(self, vault_address: str, sequence_id: int) -> tuple:
        return find_program_address(proposal_seeds(vault_address, sequence_id), self.program_id)

    def _load_vault(self, vault_address: str) -> Vault:
        try:
            data = self.ledger.load(vault_address, VAULT_KIND)
        except AccountNotFound:
            raise InvalidVault(f"Vault not found: {_short(vault_address)}")
        vault = Vault.from_dict(data)
        if vault.address != vault_address or not verify_program_address(
            vault_address, vault_seeds(vault.creator), vault.bump, self.program_id
        ):
            raise InvalidVault("Vault address does not match its seeds")
        return vault

    def _load_proposal(self, vault: Vault, proposal_address: str) -> Proposal:
        try:
            data = self.ledger.load(proposal_address, PROPOSAL_KIND)
        except (AccountNotFound, InvalidVault):
            raise InvalidProposal(f"Proposal not found: {_short(proposal_address)}")
        proposal = Proposal.from_dict(data)
        authorization.require_in_vault(vault, proposal)
        if proposal.address != proposal_address or not verify_program_address(
            proposal_address,
            proposal_seeds(vault.address, proposal.sequence_id),
            proposal.bump,
            self.program_id,
        ):
            raise InvalidProposal("Proposal address does not match its seeds")
        return proposal

    # Operations

    def create_vault(self, creator: str, owners: Sequence[str], threshold: int) -> Vault:
        """Register a new vault for ``creator``; the creator pays for the account"""
        try:
            authorization.validate_vault_params(owners, threshold, self.settings.max_owners)
            owners = list(owners)
            address, bump = self.derive_vault_address(creator)

            with self.ledger.transaction():
                if self.ledger.exists(address):
                    raise VaultAlreadyExists(f"Vault already exists: {_short(address)}")

                vault = Vault(
                    address=address,
                    bump=bump,
                    creator=creator,
                    owners=owners,
                    threshold=threshold,
                )
                self.ledger.allocate(address, VAULT_KIND, vault.to_dict(), payer=creator)
                self.ledger.emit(
                    "VaultCreated", vault=address, owners=list(owners), threshold=threshold
                )
        except VaultError as e:
            logger.warning("create_vault rejected for %s: %s", _short(creator), e.code)
            raise

        logger.info(
            "Created vault %s (%d-of-%d)", _short(address), threshold, len(owners)
        )
        return vault

    def deposit(self, depositor: str, vault_address: str, amount: int) -> int:
        """Move ``amount`` from depositor into vault custody; returns new balance"""
        try:
            authorization.require_positive_amount(amount)
            with self.ledger.transaction():
                self._load_vault(vault_address)
                self.ledger.transfer(depositor, vault_address, amount)
                self.ledger.emit(
                    "Deposited", vault=vault_address, depositor=depositor, amount=amount
                )
                balance = self.ledger.balance_of(vault_address)
        except VaultError as e:
            logger.warning("deposit rejected for vault %s: %s", _short(vault_address), e.code)
            raise

        logger.info("Deposited %d into vault %s", amount, _short(vault_address))
        return balance

    def create_proposal(self, proposer: str, vault_address: str,
                        destination: str, amount: int) -> Proposal:
        """Open a spend proposal. Funds are not checked until execution."""
        try:
            with self.ledger.transaction():
                vault = self._load_vault(vault_address)
                authorization.require_owner(vault, proposer)
                authorization.require_positive_amount(amount)

                sequence_id = vault.next_sequence_id()
                address, bump = self.derive_proposal_address(vault.address, sequence_id)
                proposal = Proposal(
                    address=address,
                    bump=bump,
                    vault=vault.address,
                    proposer=proposer,
                    destination=destination,
                    amount=amount,
                    sequence_id=sequence_id,
                )
                # Counter and proposal commit together or not at all
                self.ledger.allocate(address, PROPOSAL_KIND, proposal.to_dict(), payer=proposer)
                self.ledger.store(vault.address, vault.to_dict())
                self.ledger.emit(
                    "ProposalCreated",
                    vault=vault.address,
                    proposal=address,
                    sequence_id=sequence_id,
                    proposer=proposer,
                    destination=destination,
                    amount=amount,
                )
        except VaultError as e:
            logger.warning("create_proposal rejected for vault %s: %s", _short(vault_address), e.code)
            raise

        logger.info(
            "Proposal #%d on vault %s: %d to %s",
            sequence_id, _short(vault_address), amount, _short(destination),
        )
        return proposal

    def approve(self, signer: str, vault_address: str, proposal_address: str) -> Proposal:
        try:
            with self.ledger.transaction():
                vault = self._load_vault(vault_address)
                proposal = self._load_proposal(vault, proposal_address)
                authorization.check_approval(vault, proposal, signer)

                proposal.approvals.append(signer)
                self.ledger.store(proposal.address, proposal.to_dict())
                self.ledger.emit(
                    "ProposalApproved",
                    vault=vault.address,
                    proposal=proposal.address,
                    signer=signer,
                    approvals=proposal.approval_count,
                )
        except VaultError as e:
            logger.warning("approve rejected for proposal %s: %s", _short(proposal_address), e.code)
            raise

        logger.info(
            "Proposal %s approved (%d/%d)",
            _short(proposal_address), proposal.approval_count, vault.threshold,
        )
        return proposal

    def execute(self, vault_address: str, proposal_address: str, destination: str,
                caller: Optional[str] = None) -> Proposal:
        """Transfer the proposal amount once the threshold is met.

        Anyone may call this; ``caller`` is recorded for the audit trail only.
        """
        try:
            with self.ledger.transaction():
                vault = self._load_vault(vault_address)
                proposal = self._load_proposal(vault, proposal_address)
                authorization.check_execution(
                    vault, proposal, destination, self.ledger.available_balance(vault.address)
                )

                self.ledger.transfer(vault.address, destination, proposal.amount)
                proposal.status = ProposalStatus.EXECUTED
                proposal.resolved_by = caller
                self.ledger.store(proposal.address, proposal.to_dict())
                self.ledger.emit(
                    "ProposalExecuted",
                    vault=vault.address,
                    proposal=proposal.address,
                    destination=destination,
                    amount=proposal.amount,
                    caller=caller,
                )
        except VaultError as e:
            logger.warning("execute rejected for proposal %s: %s", _short(proposal_address), e.code)
            raise

        logger.info(
            "Executed proposal %s: %d to %s",
            _short(proposal_address), proposal.amount, _short(destination),
        )
        return proposal

    def cancel_proposal(self, canceller: str, vault_address: str, proposal_address: str) -> Proposal:
        try:
            with self.ledger.transaction():
                vault = self._load_vault(vault_address)
                proposal = self._load_proposal(vault, proposal_address)
                authorization.check_cancellation(vault, proposal, canceller)

                proposal.status = ProposalStatus.CANCELLED
                proposal.resolved_by = canceller
                self.ledger.store(proposal.address, proposal.to_dict())
                self.ledger.emit(
                    "ProposalCancelled",
                    vault=vault.address,
                    proposal=proposal.address,
                    canceller=canceller,
                )
        except VaultError as e:
            logger.warning("cancel rejected for proposal %s: %s", _short(proposal_address), e.code)
            raise

        logger.info("Cancelled proposal %s", _short(proposal_address))
        return proposal

    # Reads

    def get_vault(self, vault_address: str) -> Vault:
        return self._load_vault(vault_address)

    def get_proposal(self, vault_address: str, proposal_address: str) -> Proposal:
        return self._load_proposal(self._load_vault(vault_address), proposal_address)

    def get_proposal_by_sequence(self, vault_address: str, sequence_id: int) -> Proposal:
        vault = self._load_vault(vault_address)
        if not (0 <= sequence_id < vault.proposal_count):
            raise InvalidProposal(f"No proposal #{sequence_id} on this vault")
        address, _ = self.derive_proposal_address(vault.address, sequence_id)
        return self._load_proposal(vault, address)

    def list_proposals(self, vault_address: str,
                       status: Optional[ProposalStatus] = None) -> List[Proposal]:
        """Proposals of a vault in sequence order"""
        vault = self._load_vault(vault_address)
        proposals = []
        for sequence_id in range(vault.proposal_count):
            address, _ = self.derive_proposal_address(vault.address, sequence_id)
            proposal = self._load_proposal(vault, address)
            if status is None or proposal.status is status:
                proposals.append(proposal)
        return proposals

    def vault_balance(self, vault_address: str) -> int:
        self._load_vault(vault_address)
        return self.ledger.balance_of(vault_address)
