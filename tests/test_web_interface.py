import unittest
import uuid
from multisig_vault.keys import OwnerKey
from multisig_vault.program import MultisigProgram
from multisig_vault.vault import ProposalStatus
from web_interface.app import create_app, request_message


class TestWebInterface(unittest.TestCase):

    def setUp(self):
        """Set up app with a funded creator and three owner keys"""
        self.program = MultisigProgram()
        self.app = create_app(self.program)
        self.client = self.app.test_client()

        self.creator = OwnerKey()
        self.owners = [OwnerKey() for _ in range(3)]
        self.outsider = OwnerKey()
        self.recipient = OwnerKey().identity
        self.program.ledger.fund(self.creator.identity, 10)

    def signed_post(self, path, key, signer_field, **body):
        body[signer_field] = key.identity
        body.setdefault('nonce', uuid.uuid4().hex)
        body['signature'] = key.sign_message(request_message(path, body))
        return self.client.post(path, json=body)

    def create_vault(self):
        response = self.signed_post(
            '/api/vaults', self.creator, 'creator',
            owners=[k.identity for k in self.owners], threshold=2,
        )
        self.assertEqual(response.status_code, 201)
        return response.get_json()['vault']['address']

    def create_proposal(self, vault_address, amount=2):
        response = self.signed_post(
            f'/api/vaults/{vault_address}/proposals', self.owners[0], 'proposer',
            destination=self.recipient, amount=amount,
        )
        self.assertEqual(response.status_code, 201)
        return response.get_json()['proposal']['address']

    def test_full_lifecycle(self):
        """Test create, deposit, propose, approve and execute over HTTP"""
        vault_address = self.create_vault()

        response = self.signed_post(
            f'/api/vaults/{vault_address}/deposit', self.creator, 'depositor', amount=5
        )
        self.assertEqual(response.get_json()['balance'], 5)

        proposal_address = self.create_proposal(vault_address)
        base = f'/api/vaults/{vault_address}/proposals/{proposal_address}'

        for key in self.owners[1:]:
            response = self.signed_post(f'{base}/approve', key, 'signer')
            self.assertEqual(response.status_code, 200)

        response = self.client.post(f'{base}/execute', json={'destination': self.recipient})
        data = response.get_json()
        self.assertEqual(response.status_code, 200)
        self.assertTrue(data['proposal']['executed'])
        self.assertEqual(data['proposal']['status'], 'executed')
        self.assertEqual(data['remaining_balance'], 3)
        self.assertEqual(self.program.ledger.balance_of(self.recipient), 2)

    def test_get_vault(self):
        vault_address = self.create_vault()
        data = self.client.get(f'/api/vaults/{vault_address}').get_json()
        self.assertEqual(data['threshold'], 2)
        self.assertEqual(data['proposal_count'], 0)
        self.assertEqual(data['balance'], 0)
        self.assertEqual(data['owners'], [k.identity for k in self.owners])

    def test_unknown_vault(self):
        response = self.client.get('/api/vaults/' + '00' * 32)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['code'], 'AccountNotFound')

    def test_invalid_threshold(self):
        response = self.signed_post(
            '/api/vaults', self.creator, 'creator',
            owners=[k.identity for k in self.owners], threshold=0,
        )
        self.assertEqual(response.status_code, 400)
        data = response.get_json()
        self.assertFalse(data['success'])
        self.assertEqual(data['code'], 'InvalidThreshold')

    def test_forged_signature_rejected(self):
        """Test a request signed by someone other than the named signer"""
        vault_address = self.create_vault()
        proposal_address = self.create_proposal(vault_address)
        path = f'/api/vaults/{vault_address}/proposals/{proposal_address}/approve'

        body = {'signer': self.owners[1].identity, 'nonce': uuid.uuid4().hex}
        body['signature'] = self.outsider.sign_message(request_message(path, body))
        response = self.client.post(path, json=body)

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()['code'], 'InvalidSignature')
        proposal = self.client.get(
            f'/api/vaults/{vault_address}/proposals/{proposal_address}'
        ).get_json()
        self.assertEqual(proposal['approvals'], [])

    def test_signature_bound_to_route(self):
        vault_address = self.create_vault()
        proposal_address = self.create_proposal(vault_address)
        base = f'/api/vaults/{vault_address}/proposals/{proposal_address}'

        body = {'signer': self.owners[1].identity, 'nonce': uuid.uuid4().hex}
        body['signature'] = self.owners[1].sign_message(request_message(f'{base}/approve', body))
        cancel_body = {'canceller': self.owners[1].identity, 'nonce': body['nonce'],
                       'signature': body['signature']}
        response = self.client.post(f'{base}/cancel', json=cancel_body)
        self.assertEqual(response.status_code, 401)

    def test_outsider_cannot_propose(self):
        vault_address = self.create_vault()
        response = self.signed_post(
            f'/api/vaults/{vault_address}/proposals', self.outsider, 'proposer',
            destination=self.recipient, amount=1,
        )
        self.assertEqual(response.status_code, 400)
        data = response.get_json()
        self.assertEqual(data['code'], 'Unauthorized')
        self.assertEqual(data['error'], 'Signer is not an owner')

    def test_cancel_and_list(self):
        vault_address = self.create_vault()
        first = self.create_proposal(vault_address)
        second = self.create_proposal(vault_address, amount=1)

        response = self.signed_post(
            f'/api/vaults/{vault_address}/proposals/{first}/cancel', self.owners[2], 'canceller'
        )
        self.assertEqual(response.get_json()['proposal']['status'], 'cancelled')

        listed = self.client.get(f'/api/vaults/{vault_address}/proposals').get_json()
        self.assertEqual([p['address'] for p in listed['proposals']], [first, second])

        pending = self.client.get(
            f'/api/vaults/{vault_address}/proposals?status=pending'
        ).get_json()
        self.assertEqual([p['address'] for p in pending['proposals']], [second])

        bad = self.client.get(f'/api/vaults/{vault_address}/proposals?status=weird')
        self.assertEqual(bad.status_code, 400)

    def test_execute_without_approvals(self):
        vault_address = self.create_vault()
        proposal_address = self.create_proposal(vault_address)
        response = self.client.post(
            f'/api/vaults/{vault_address}/proposals/{proposal_address}/execute',
            json={'destination': self.recipient},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'InsufficientApprovals')

    def test_replayed_deposit_rejected(self):
        """Test a captured deposit request cannot be sent twice"""
        vault_address = self.create_vault()
        path = f'/api/vaults/{vault_address}/deposit'
        body = {'depositor': self.creator.identity, 'amount': 3, 'nonce': uuid.uuid4().hex}
        body['signature'] = self.creator.sign_message(request_message(path, body))

        first = self.client.post(path, json=body)
        self.assertEqual(first.status_code, 200)
        replay = self.client.post(path, json=body)
        self.assertEqual(replay.status_code, 401)
        self.assertEqual(replay.get_json()['code'], 'InvalidSignature')

        self.assertEqual(self.program.ledger.balance_of(vault_address), 3)
        self.assertEqual(self.program.ledger.balance_of(self.creator.identity), 7)

    def test_replayed_proposal_rejected(self):
        vault_address = self.create_vault()
        path = f'/api/vaults/{vault_address}/proposals'
        body = {'proposer': self.owners[0].identity, 'destination': self.recipient,
                'amount': 2, 'nonce': uuid.uuid4().hex}
        body['signature'] = self.owners[0].sign_message(request_message(path, body))

        self.assertEqual(self.client.post(path, json=body).status_code, 201)
        for _ in range(2):
            self.assertEqual(self.client.post(path, json=body).status_code, 401)

        self.assertEqual(self.program.get_vault(vault_address).proposal_count, 1)

    def test_nonce_required(self):
        vault_address = self.create_vault()
        path = f'/api/vaults/{vault_address}/deposit'
        body = {'depositor': self.creator.identity, 'amount': 3}
        body['signature'] = self.creator.sign_message(request_message(path, body))

        response = self.client.post(path, json=body)
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.program.ledger.balance_of(vault_address), 0)

    def test_owners_must_be_a_list_of_strings(self):
        for owners in ("abc", [{}], [[1]]):
            response = self.signed_post(
                '/api/vaults', self.creator, 'creator', owners=owners, threshold=1,
            )
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.get_json()['code'], 'InvalidOwners')

    def test_unsigned_caller_rejected(self):
        """Test execute refuses to record a caller who did not sign"""
        vault_address = self.create_vault()
        self.program.deposit(self.creator.identity, vault_address, 5)
        proposal_address = self.create_proposal(vault_address)
        base = f'/api/vaults/{vault_address}/proposals/{proposal_address}'
        for key in self.owners[:2]:
            self.signed_post(f'{base}/approve', key, 'signer')

        response = self.client.post(
            f'{base}/execute', json={'destination': self.recipient, 'caller': self.outsider.identity}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.program.get_proposal(vault_address, proposal_address).status,
                         ProposalStatus.PENDING)

        response = self.signed_post(
            f'{base}/execute', self.outsider, 'caller', destination=self.recipient
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['proposal']['resolved_by'], self.outsider.identity)


if __name__ == '__main__':
    unittest.main()
