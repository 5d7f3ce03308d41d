import os
import unittest
from unittest import mock
from multisig_vault.config import MAX_OWNERS, VaultSettings
from multisig_vault.errors import TooManyOwners
from multisig_vault.program import MultisigProgram


class TestVaultSettings(unittest.TestCase):

    def test_defaults(self):
        settings = VaultSettings()
        self.assertEqual(settings.max_owners, 10)
        self.assertEqual(settings.min_retained_balance, 0)

    def test_from_env(self):
        env = {
            "MULTISIG_MAX_OWNERS": "4",
            "MULTISIG_MIN_RETAINED_BALANCE": "7",
            "MULTISIG_PROGRAM_ID": "test-program",
            "PORT": "8080",
            "MULTISIG_LOG_LEVEL": "debug",
        }
        with mock.patch.dict(os.environ, env):
            settings = VaultSettings.from_env()

        self.assertEqual(settings.max_owners, 4)
        self.assertEqual(settings.min_retained_balance, 7)
        self.assertEqual(settings.program_id, "test-program")
        self.assertEqual(settings.port, 8080)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_owner_cap_cannot_be_raised(self):
        settings = VaultSettings(max_owners=50)
        self.assertEqual(settings.max_owners, MAX_OWNERS)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            VaultSettings(max_owners=0)
        with self.assertRaises(ValueError):
            VaultSettings(min_retained_balance=-1)

    def test_lower_cap_applies_to_vaults(self):
        program = MultisigProgram(settings=VaultSettings(max_owners=2))
        with self.assertRaises(TooManyOwners):
            program.create_vault("creator", ["a", "b", "c"], 1)

    def test_program_id_changes_addresses(self):
        default = MultisigProgram().derive_vault_address("creator")
        other = MultisigProgram(settings=VaultSettings(program_id="other")).derive_vault_address("creator")
        self.assertNotEqual(default[0], other[0])


if __name__ == '__main__':
    unittest.main()
