from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ProposalStatus(Enum):
    PENDING = "pending"
    EXECUTED = "executed"
    CANCELLED = "cancelled"


@dataclass
class Vault:
    """Shared custody account controlled by an owner set and threshold"""
    address: str
    bump: int
    creator: str
    owners: List[str]
    threshold: int
    proposal_count: int = 0  # next sequence id, never decreases

    def is_owner(self, identity: str) -> bool:
        """Check if identity is in the owner set"""
        return identity in self.owners

    def next_sequence_id(self) -> int:
        """Snapshot the counter and advance it"""
        sequence_id = self.proposal_count
        self.proposal_count += 1
        return sequence_id

    def to_dict(self) -> dict:
        """Serialize vault to dictionary"""
        return {
            'address': self.address,
            'bump': self.bump,
            'creator': self.creator,
            'owners': list(self.owners),
            'threshold': self.threshold,
            'proposal_count': self.proposal_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Vault':
        """Deserialize vault from dictionary"""
        return cls(
            address=data['address'],
            bump=data['bump'],
            creator=data['creator'],
            owners=list(data['owners']),
            threshold=data['threshold'],
            proposal_count=data['proposal_count'],
        )


@dataclass
class Proposal:
    """Request to move value out of a single vault"""
    address: str
    bump: int
    vault: str  # owning vault address
    proposer: str
    destination: str
    amount: int
    sequence_id: int
    approvals: List[str] = field(default_factory=list)
    status: ProposalStatus = ProposalStatus.PENDING
    resolved_by: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.status is not ProposalStatus.PENDING

    @property
    def executed(self) -> bool:
        # Cancelled proposals read as executed, matching the on-ledger flag
        return self.resolved

    @property
    def approval_count(self) -> int:
        return len(self.approvals)

    def has_approved(self, identity: str) -> bool:
        return identity in self.approvals

    def to_dict(self) -> dict:
        """Serialize proposal to dictionary"""
        return {
            'address': self.address,
            'bump': self.bump,
            'vault': self.vault,
            'proposer': self.proposer,
            'destination': self.destination,
            'amount': self.amount,
            'sequence_id': self.sequence_id,
            'approvals': list(self.approvals),
            'status': self.status.value,
            'resolved_by': self.resolved_by,
            'executed': self.executed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Proposal':
        """Deserialize proposal from dictionary"""
        return cls(
            address=data['address'],
            bump=data['bump'],
            vault=data['vault'],
            proposer=data['proposer'],
            destination=data['destination'],
            amount=data['amount'],
            sequence_id=data['sequence_id'],
            approvals=list(data.get('approvals', [])),
            status=ProposalStatus(data.get('status', ProposalStatus.PENDING.value)),
            resolved_by=data.get('resolved_by'),
        )
