#!/usr/bin/env python3
"""
Example: Running spend proposals through different approval scenarios
"""

from multisig_vault import MultisigProgram, OwnerKey, ProposalStatus
from multisig_vault.errors import VaultError


def main():
    print("=== Spend Proposal Scenarios ===")
    print()

    program = MultisigProgram()
    ledger = program.ledger

    print("🏗️  Setting up 2-of-3 vault...")
    keys = {name: OwnerKey().identity for name in ["Alice", "Bob", "Carol"]}
    outsider = OwnerKey().identity
    creator = OwnerKey().identity
    recipient = OwnerKey().identity
    ledger.fund(creator, 100)

    vault = program.create_vault(creator, list(keys.values()), 2)
    program.deposit(creator, vault.address, 50)
    print(f"   Vault Balance: {program.vault_balance(vault.address)}")
    print()

    scenarios = [
        {
            'name': 'Single approval',
            'amount': 10,
            'approvers': ['Bob'],
            'should_pass': False
        },
        {
            'name': 'Two approvals',
            'amount': 10,
            'approvers': ['Bob', 'Carol'],
            'should_pass': True
        },
        {
            'name': 'All owners approve',
            'amount': 20,
            'approvers': ['Alice', 'Bob', 'Carol'],
            'should_pass': True
        },
        {
            'name': 'More than the vault holds',
            'amount': 500,
            'approvers': ['Alice', 'Bob'],
            'should_pass': False
        }
    ]

    for i, scenario in enumerate(scenarios, 1):
        print(f"📝 Test {i}: {scenario['name']}")
        print(f"   Amount: {scenario['amount']}")
        print(f"   Approvers: {len(scenario['approvers'])}")

        proposal = program.create_proposal(keys['Alice'], vault.address, recipient, scenario['amount'])
        for name in scenario['approvers']:
            program.approve(keys[name], vault.address, proposal.address)

        try:
            program.execute(vault.address, proposal.address, recipient, caller=outsider)
            print(f"   ✅ Executed, vault balance: {program.vault_balance(vault.address)}")
            if not scenario['should_pass']:
                print("   ❌ Unexpected result: Should have failed")
        except VaultError as e:
            print(f"   ❌ Execution rejected: {e}")
            if not scenario['should_pass']:
                print("   ✅ Expected result: FAIL")
                program.cancel_proposal(keys['Alice'], vault.address, proposal.address)
                print("   🗑️  Proposal cancelled")
            else:
                print("   ❌ Unexpected result: Should have passed")

        print()

    print("🔒 Outsider attempts")
    proposal = program.create_proposal(keys['Bob'], vault.address, recipient, 1)
    for action, call in [
        ('propose', lambda: program.create_proposal(outsider, vault.address, outsider, 1)),
        ('approve', lambda: program.approve(outsider, vault.address, proposal.address)),
        ('cancel', lambda: program.cancel_proposal(outsider, vault.address, proposal.address)),
    ]:
        try:
            call()
            print(f"   ❌ {action}: unexpectedly accepted")
        except VaultError as e:
            print(f"   ✅ {action}: {e}")

    print()
    pending = program.list_proposals(vault.address, ProposalStatus.PENDING)
    print(f"📊 Pending proposals: {len(pending)}, recipient holds {ledger.balance_of(recipient)}")
    print("🎯 Scenario testing complete!")


if __name__ == "__main__":
    main()
