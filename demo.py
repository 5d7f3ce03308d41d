#!/usr/bin/env python3
"""
Complete demo of the Multisig Vault engine
"""

from multisig_vault import MultisigProgram, OwnerKey
from multisig_vault.errors import VaultError


def main():
    print("=" * 60)
    print("🏦 MULTISIG VAULT - COMPLETE DEMO")
    print("=" * 60)
    print()

    # Step 1: Setup
    print("🔧 STEP 1: Setting up vault owners")
    print("-" * 40)

    program = MultisigProgram()
    ledger = program.ledger

    owners = {}
    for name in ["Alice", "Bob", "Carol"]:
        owners[name] = OwnerKey().identity
        print(f"✅ {name}: {owners[name][:16]}...")

    creator = OwnerKey().identity
    recipient = OwnerKey().identity
    ledger.fund(creator, 10)
    print()

    # Step 2: Create Vault
    print("🏗️  STEP 2: Creating 2-of-3 vault")
    print("-" * 40)

    vault = program.create_vault(creator, list(owners.values()), 2)
    print(f"✅ Vault address: {vault.address}")
    print(f"✅ Bump: {vault.bump}")
    print(f"✅ Rules: {vault.threshold}-of-{len(vault.owners)} approvals required")

    program.deposit(creator, vault.address, 5)
    print(f"✅ Deposited 5 units, balance: {program.vault_balance(vault.address)}")
    print()

    # Step 3: Proposal lifecycle
    print("🗳️  STEP 3: Proposing a transfer of 2 units")
    print("-" * 40)

    proposal = program.create_proposal(owners["Alice"], vault.address, recipient, 2)
    print(f"✅ Proposal #{proposal.sequence_id} created by Alice")

    program.approve(owners["Bob"], vault.address, proposal.address)
    print("   Bob approves: ✅ (1/2)")

    try:
        program.execute(vault.address, proposal.address, recipient)
        print("   ❌ UNEXPECTED: execution should need 2 approvals")
    except VaultError as e:
        print(f"   ✅ EXPECTED FAILURE: {e}")

    try:
        program.approve(owners["Bob"], vault.address, proposal.address)
        print("   ❌ UNEXPECTED: Bob approved twice")
    except VaultError as e:
        print(f"   ✅ EXPECTED FAILURE: {e}")

    program.approve(owners["Carol"], vault.address, proposal.address)
    print("   Carol approves: ✅ (2/2)")

    proposal = program.execute(vault.address, proposal.address, recipient)
    print(f"✅ Executed, status: {proposal.status.value}")
    print(f"   💰 Vault balance: {program.vault_balance(vault.address)}")
    print(f"   💰 Recipient balance: {ledger.balance_of(recipient)}")
    print()

    # Step 4: Over-budget and cancelled proposals
    print("🚫 STEP 4: Over-budget and cancelled proposals")
    print("-" * 40)

    large = program.create_proposal(owners["Alice"], vault.address, recipient, 10)
    program.approve(owners["Bob"], vault.address, large.address)
    program.approve(owners["Carol"], vault.address, large.address)
    try:
        program.execute(vault.address, large.address, recipient)
        print("   ❌ UNEXPECTED: vault cannot cover 10 units")
    except VaultError as e:
        print(f"   ✅ EXPECTED FAILURE: {e}")

    cancelled = program.cancel_proposal(owners["Alice"], vault.address, large.address)
    print(f"✅ Alice cancelled proposal #{cancelled.sequence_id}: {cancelled.status.value}")
    print()

    # Step 5: Summary
    print("📈 STEP 5: Summary")
    print("-" * 40)
    vault = program.get_vault(vault.address)
    print(f"   Vault balance: {program.vault_balance(vault.address)}")
    print(f"   Proposals created: {vault.proposal_count}")
    print(f"   Events recorded: {len(ledger.events())}")
    for event in ledger.events():
        print(f"     #{event['sequence']} {event['event']}")


if __name__ == "__main__":
    main()
