import os
from dataclasses import dataclass

# Hard cap on the owner set; settings may lower it, never raise it
MAX_OWNERS = 10

DEFAULT_PROGRAM_ID = "93ht2ibZuN5AHhXchvPWhN9Rf79viZZH91UTrojUCWow"


@dataclass(frozen=True)
class VaultSettings:
    """Runtime settings for the vault engine and its HTTP service"""

    max_owners: int = MAX_OWNERS
    min_retained_balance: int = 0  # reserve every program-owned account keeps
    program_id: str = DEFAULT_PROGRAM_ID
    port: int = 10000
    log_level: str = "INFO"

    def __post_init__(self):
        if self.max_owners < 1:
            raise ValueError("max_owners must be at least 1")
        if self.max_owners > MAX_OWNERS:
            object.__setattr__(self, 'max_owners', MAX_OWNERS)
        if self.min_retained_balance < 0:
            raise ValueError("min_retained_balance cannot be negative")

    @classmethod
    def from_env(cls) -> 'VaultSettings':
        """Build settings from MULTISIG_* environment variables"""
        return cls(
            max_owners=int(os.environ.get("MULTISIG_MAX_OWNERS", MAX_OWNERS)),
            min_retained_balance=int(os.environ.get("MULTISIG_MIN_RETAINED_BALANCE", "0")),
            program_id=os.environ.get("MULTISIG_PROGRAM_ID", DEFAULT_PROGRAM_ID),
            port=int(os.environ.get("PORT", "10000")),
            log_level=os.environ.get("MULTISIG_LOG_LEVEL", "INFO").upper(),
        )
