#!/usr/bin/env python3
"""
Web interface for the Multisig Vault

Signer-authorized routes carry a ``nonce`` and a ``signature`` field: the
signer's ecdsa signature over ``request_message(path, body)``. A nonce is
accepted once per signer, so a captured request cannot be replayed. Execution
is permissionless; a ``caller`` recorded as the executor must sign like any
other signer.
"""

import json
import logging
import threading

from flask import Flask, jsonify, request

from multisig_vault.config import VaultSettings
from multisig_vault.errors import AccountNotFound, InvalidSignature, VaultError
from multisig_vault.keys import OwnerKey
from multisig_vault.program import MultisigProgram
from multisig_vault.vault import ProposalStatus

logger = logging.getLogger(__name__)


def request_message(path: str, body: dict) -> bytes:
    """Canonical bytes a signer signs for a request to ``path``"""
    unsigned = {k: v for k, v in body.items() if k != 'signature'}
    return json.dumps({'path': path, 'body': unsigned}, sort_keys=True, separators=(',', ':')).encode()


class NonceRegistry:
    """Nonces already accepted, per signer"""

    def __init__(self):
        self._seen = set()
        self._lock = threading.Lock()

    def claim(self, signer: str, nonce: str) -> None:
        with self._lock:
            if (signer, nonce) in self._seen:
                raise InvalidSignature("Request nonce already used")
            self._seen.add((signer, nonce))


def _authenticate(body: dict, signer_field: str, nonces: NonceRegistry) -> str:
    signer = body.get(signer_field)
    signature = body.get('signature')
    nonce = body.get('nonce')
    if not signer or not signature:
        raise InvalidSignature(f"Missing {signer_field} or signature")
    if not isinstance(nonce, str) or not nonce:
        raise InvalidSignature("Missing request nonce")
    if not OwnerKey.verify_signature(request_message(request.path, body), signature, signer):
        raise InvalidSignature()
    nonces.claim(signer, nonce)
    return signer


def _error(e: VaultError):
    status = 404 if isinstance(e, AccountNotFound) else 401 if isinstance(e, InvalidSignature) else 400
    payload = {'success': False}
    payload.update(e.to_dict())
    return jsonify(payload), status


def create_app(program: MultisigProgram = None) -> Flask:
    app = Flask(__name__)
    program = program or MultisigProgram(settings=VaultSettings.from_env())
    app.config['PROGRAM'] = program
    nonces = app.config['NONCES'] = NonceRegistry()

    def authenticate(body, signer_field):
        return _authenticate(body, signer_field, nonces)

    def vault_payload(vault_address):
        vault = program.get_vault(vault_address)
        data = vault.to_dict()
        data['balance'] = program.ledger.balance_of(vault_address)
        return data

    def require_vault(vault_address):
        if not program.ledger.exists(vault_address):
            raise AccountNotFound('Vault not found')

    @app.errorhandler(VaultError)
    def handle_vault_error(e):
        logger.info("Request to %s failed: %s", request.path, e.code)
        return _error(e)

    @app.route('/api/vaults', methods=['POST'])
    def create_vault():
        """Create new multisig vault"""
        data = request.get_json(force=True)
        creator = authenticate(data, 'creator')
        vault = program.create_vault(creator, data.get('owners', []), data.get('threshold', 0))
        return jsonify({'success': True, 'vault': vault_payload(vault.address)}), 201

    @app.route('/api/vaults/<vault_address>')
    def get_vault(vault_address):
        """Get vault information"""
        require_vault(vault_address)
        return jsonify(vault_payload(vault_address))

    @app.route('/api/vaults/<vault_address>/deposit', methods=['POST'])
    def deposit(vault_address):
        require_vault(vault_address)
        data = request.get_json(force=True)
        depositor = authenticate(data, 'depositor')
        balance = program.deposit(depositor, vault_address, data.get('amount', 0))
        return jsonify({'success': True, 'balance': balance})

    @app.route('/api/vaults/<vault_address>/proposals', methods=['POST'])
    def create_proposal(vault_address):
        """Create spend proposal"""
        require_vault(vault_address)
        data = request.get_json(force=True)
        proposer = authenticate(data, 'proposer')
        proposal = program.create_proposal(
            proposer, vault_address, data.get('destination', ''), data.get('amount', 0)
        )
        return jsonify({'success': True, 'proposal': proposal.to_dict()}), 201

    @app.route('/api/vaults/<vault_address>/proposals')
    def list_proposals(vault_address):
        require_vault(vault_address)
        status = request.args.get('status')
        if status is not None:
            try:
                status = ProposalStatus(status)
            except ValueError:
                return jsonify({'success': False, 'code': 'InvalidStatus',
                                'error': f"Unknown status: {status}"}), 400
        proposals = program.list_proposals(vault_address, status)
        return jsonify({'proposals': [p.to_dict() for p in proposals]})

    @app.route('/api/vaults/<vault_address>/proposals/<proposal_address>')
    def get_proposal(vault_address, proposal_address):
        require_vault(vault_address)
        return jsonify(program.get_proposal(vault_address, proposal_address).to_dict())

    @app.route('/api/vaults/<vault_address>/proposals/<proposal_address>/approve', methods=['POST'])
    def approve(vault_address, proposal_address):
        require_vault(vault_address)
        data = request.get_json(force=True)
        signer = authenticate(data, 'signer')
        proposal = program.approve(signer, vault_address, proposal_address)
        return jsonify({'success': True, 'proposal': proposal.to_dict()})

    @app.route('/api/vaults/<vault_address>/proposals/<proposal_address>/execute', methods=['POST'])
    def execute(vault_address, proposal_address):
        require_vault(vault_address)
        data = request.get_json(force=True)
        caller = authenticate(data, 'caller') if 'caller' in data else None
        proposal = program.execute(
            vault_address, proposal_address, data.get('destination', ''), caller=caller
        )
        return jsonify({
            'success': True,
            'proposal': proposal.to_dict(),
            'remaining_balance': program.ledger.balance_of(vault_address),
        })

    @app.route('/api/vaults/<vault_address>/proposals/<proposal_address>/cancel', methods=['POST'])
    def cancel(vault_address, proposal_address):
        require_vault(vault_address)
        data = request.get_json(force=True)
        canceller = authenticate(data, 'canceller')
        proposal = program.cancel_proposal(canceller, vault_address, proposal_address)
        return jsonify({'success': True, 'proposal': proposal.to_dict()})

    return app


if __name__ == "__main__":
    settings = VaultSettings.from_env()
    logging.basicConfig(level=settings.log_level)
    app = create_app(MultisigProgram(settings=settings))
    app.run(
        host="0.0.0.0",
        port=settings.port,
        debug=False
    )
