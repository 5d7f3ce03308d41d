"""
Multisig Vault - threshold-authorized custody
K-of-N owner approvals gate every outbound transfer
"""

from .config import VaultSettings
from .errors import VaultError
from .keys import OwnerKey
from .ledger import Ledger
from .program import MultisigProgram
from .vault import Proposal, ProposalStatus, Vault

__version__ = "0.2.0"
__all__ = [
    "Vault",
    "Proposal",
    "ProposalStatus",
    "MultisigProgram",
    "Ledger",
    "OwnerKey",
    "VaultSettings",
    "VaultError",
]
