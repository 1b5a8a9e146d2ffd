"""In-memory chain used to exercise the deployment procedure without a node"""

import asyncio

import pytest

from etf_deploy.errors import (
    ChainError,
    DeploymentError,
    DeploymentTimeoutError,
    NetworkError,
    NotFoundError,
    RejectedTransactionError,
)
from etf_deploy.network import compute_create_address
from etf_deploy.signers import Signer

DEPLOYER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


class FakeHandle:
    def __init__(self, chain, tx_hash, deployer, predicted_address):
        self.chain = chain
        self.tx_hash = tx_hash
        self.deployer = deployer
        self.predicted_address = predicted_address
        self.receipt = None
        self._address = None

    @property
    def address(self):
        if self._address is None:
            raise DeploymentError("not confirmed")
        return self._address

    async def wait_for_deployment(self, timeout=120.0, confirmations=1, poll_interval=0.5):
        self.chain.waits.append((timeout, confirmations))
        if self.chain.revert:
            raise ChainError(f"Deployment transaction {self.tx_hash} reverted", tx_hash=self.tx_hash)
        try:
            await asyncio.wait_for(asyncio.sleep(self.chain.confirmation_delay), timeout)
        except asyncio.TimeoutError as e:
            raise DeploymentTimeoutError(f"Deployment {self.tx_hash} not confirmed within {timeout}s") from e
        self.chain.block_number += 1
        self.receipt = {"status": 1, "blockNumber": self.chain.block_number}
        self._address = self.predicted_address
        return self


class FakeFactory:
    def __init__(self, chain, name, signer):
        self.chain = chain
        self.name = name
        self.signer = signer

    async def deploy(self, *constructor_args):
        if self.chain.offline:
            raise NetworkError("RPC unreachable while trying to deploy")
        if self.chain.reject_reason:
            raise RejectedTransactionError(
                f"Node rejected request to deploy {self.name}: {self.chain.reject_reason}",
                reason=self.chain.reject_reason,
            )
        nonce = self.chain.nonces.get(self.signer.address, 0)
        self.chain.nonces[self.signer.address] = nonce + 1
        self.chain.broadcasts.append((self.name, self.signer.address, constructor_args))
        tx_hash = "0x" + f"{len(self.chain.broadcasts):064x}"
        return FakeHandle(self.chain, tx_hash, self.signer,
                          compute_create_address(self.signer.address, nonce))


class FakeChain:
    network = "fakenet"

    def __init__(self, signers=(DEPLOYER, OTHER), artifacts=("ETFMintToken",)):
        self.signers = [Signer(address=address) for address in signers]
        self.artifacts = set(artifacts)
        self.nonces = {}
        self.broadcasts = []
        self.waits = []
        self.factory_requests = []
        self.block_number = 0
        self.offline = False
        self.reject_reason = None
        self.revert = False
        self.confirmation_delay = 0
        self.closed = False

    async def get_signers(self):
        if self.offline:
            raise NetworkError("RPC unreachable while trying to list node accounts")
        return list(self.signers)

    async def get_contract_factory(self, name, signer):
        self.factory_requests.append((name, signer.address))
        if name not in self.artifacts:
            raise NotFoundError(f"Artifact for contract {name} not found in artifacts")
        return FakeFactory(self, name, signer)

    async def close(self):
        self.closed = True


@pytest.fixture
def chain():
    return FakeChain()
