#!/usr/bin/env python3
"""
Example: Creating multisig vaults and the parameters the engine rejects
"""

from multisig_vault import MultisigProgram, OwnerKey
from multisig_vault.errors import VaultError


def main():
    print("=== Creating Multisig Vaults ===")
    print()

    program = MultisigProgram()

    print("🔑 Generating owner keys...")
    owners = []
    for name in ["Alice", "Bob", "Carol"]:
        private_hex, public_hex = OwnerKey.generate_key_pair()
        owners.append(public_hex)
        print(f"   {name}: {public_hex[:16]}...")
    print()

    creator = OwnerKey().identity
    address, bump = program.derive_vault_address(creator)
    print("📋 Derived vault address:")
    print(f"   Address: {address}")
    print(f"   Bump: {bump}")
    print()

    vault = program.create_vault(creator, owners, 2)
    print("🏗️  Vault Created Successfully!")
    print(f"   Threshold: {vault.threshold}-of-{len(vault.owners)}")
    print(f"   Proposal count: {vault.proposal_count}")
    print()

    print("🚫 Rejected configurations:")
    rejected = [
        ("threshold = 0", owners, 0),
        ("threshold > owners", owners[:2], 3),
        ("11 owners", [OwnerKey().identity for _ in range(11)], 5),
        ("duplicate owner", [owners[0], owners[0]], 1),
    ]
    for label, candidate_owners, threshold in rejected:
        try:
            program.create_vault(OwnerKey().identity, candidate_owners, threshold)
            print(f"   ❌ {label}: unexpectedly accepted")
        except VaultError as e:
            print(f"   ✅ {label}: {e.code} ({e})")

    try:
        program.create_vault(creator, owners, 2)
        print("   ❌ re-creation: unexpectedly accepted")
    except VaultError as e:
        print(f"   ✅ re-creation at same address: {e.code}")


if __name__ == "__main__":
    main()
