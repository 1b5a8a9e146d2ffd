"""
Network Context
Connects to an Ethereum JSON-RPC endpoint and deploys contracts through it
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
import rlp
from eth_account import Account
from eth_utils import keccak, to_canonical_address, to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TimeExhausted

from etf_deploy.artifacts import ArtifactStore, ContractArtifact
from etf_deploy.config import DeployConfig
from etf_deploy.errors import (
    RPC_ERRORS,
    ChainError,
    ConfigurationError,
    DeploymentError,
    DeploymentTimeoutError,
    NetworkError,
    translate_rpc_error,
)
from etf_deploy.signers import Signer

logger = logging.getLogger(__name__)


def compute_create_address(sender: str, nonce: int) -> str:
    """Address of a contract created by `sender` at `nonce`"""
    digest = keccak(rlp.encode([to_canonical_address(sender), nonce]))
    return to_checksum_address(digest[12:])


class DeploymentHandle:
    """A broadcast deployment transaction that may not be confirmed yet"""

    def __init__(self, web3: AsyncWeb3, artifact: ContractArtifact, tx_hash: str,
                 deployer: Signer, predicted_address: str):
        self.web3 = web3
        self.artifact = artifact
        self.tx_hash = tx_hash
        self.deployer = deployer
        self.predicted_address = predicted_address
        self.receipt = None
        self._address: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self._address is not None

    @property
    def address(self) -> str:
        if self._address is None:
            raise DeploymentError(
                f"Deployment {self.tx_hash} is not confirmed yet, await wait_for_deployment() first"
            )
        return self._address

    async def wait_for_deployment(self, timeout: float = 120.0, confirmations: int = 1,
                                  poll_interval: float = 0.5) -> "DeploymentHandle":
        """Wait until the contract is deployed

        The deployment counts as complete once the receipt reports success, the
        including block has `confirmations` confirmations and code exists at the
        contract address. All of it has to happen within `timeout` seconds.
        """
        if confirmations < 1:
            raise ValueError("confirmations must be at least 1")
        if self._address is not None:
            return self

        try:
            await asyncio.wait_for(self._confirm(timeout, confirmations, poll_interval), timeout)
        except DeploymentError:
            raise
        except (asyncio.TimeoutError, TimeExhausted) as e:
            raise DeploymentTimeoutError(
                f"Deployment {self.tx_hash} not confirmed within {timeout}s"
            ) from e
        return self

    async def _confirm(self, timeout: float, confirmations: int, poll_interval: float):
        eth = self.web3.eth
        try:
            receipt = await eth.wait_for_transaction_receipt(
                self.tx_hash, timeout=timeout, poll_latency=poll_interval
            )
        except RPC_ERRORS as e:
            raise translate_rpc_error(e, "fetch the deployment receipt") from e

        if receipt["status"] != 1:
            raise ChainError(f"Deployment transaction {self.tx_hash} reverted", tx_hash=self.tx_hash)
        contract_address = receipt.get("contractAddress")
        if not contract_address:
            raise ChainError(
                f"Receipt for {self.tx_hash} carries no contract address", tx_hash=self.tx_hash
            )
        contract_address = to_checksum_address(contract_address)
        if contract_address != self.predicted_address:
            logger.warning(
                f"Contract landed at {contract_address}, expected {self.predicted_address}"
            )

        try:
            while True:
                head = await eth.block_number
                if head - receipt["blockNumber"] + 1 >= confirmations:
                    break
                logger.debug(f"Waiting for confirmations: {head - receipt['blockNumber'] + 1}/{confirmations}")
                await asyncio.sleep(poll_interval)

            code = await eth.get_code(contract_address)
        except RPC_ERRORS as e:
            raise translate_rpc_error(e, "confirm the deployment") from e

        if not code:
            raise ChainError(
                f"No code at {contract_address} after deployment {self.tx_hash}", tx_hash=self.tx_hash
            )

        self.receipt = receipt
        self._address = contract_address


class ContractFactory:
    """Deploys new instances of one contract artifact from one signer"""

    def __init__(self, web3: AsyncWeb3, artifact: ContractArtifact, signer: Signer):
        self.web3 = web3
        self.artifact = artifact
        self.signer = signer

    async def deploy(self, *constructor_args: Any) -> DeploymentHandle:
        """Broadcast the deployment transaction and return its handle"""
        contract = self.web3.eth.contract(abi=self.artifact.abi, bytecode=self.artifact.bytecode)
        constructor = contract.constructor(*constructor_args)
        sender = self.signer.address

        try:
            nonce = await self.web3.eth.get_transaction_count(sender, "pending")
            tx: Dict[str, Any] = {"from": sender, "nonce": nonce}

            if self.signer.is_local:
                tx = await constructor.build_transaction(tx)
                signed_tx = self.signer.account.sign_transaction(tx)
                tx_hash = await self.web3.eth.send_raw_transaction(signed_tx.raw_transaction)
            else:
                tx_hash = await constructor.transact(tx)
        except RPC_ERRORS as e:
            error = translate_rpc_error(e, f"deploy {self.artifact.contract_name}")
            logger.error(f"Failed to broadcast deployment: {error}")
            raise error from e

        handle = DeploymentHandle(
            self.web3,
            self.artifact,
            Web3.to_hex(tx_hash),
            self.signer,
            compute_create_address(sender, nonce),
        )
        logger.info(f"Deployment transaction sent: {handle.tx_hash} (nonce {nonce})")
        return handle


class NetworkContext:
    def __init__(self, web3: AsyncWeb3, artifacts: ArtifactStore,
                 accounts: Sequence = (), network: str = "custom"):
        self.web3 = web3
        self.artifacts = artifacts
        self.network = network
        self.local_signers = [Signer.from_account(account) for account in accounts]

    @classmethod
    async def connect(cls, config: DeployConfig) -> "NetworkContext":
        """Initialize the Web3 connection for a configured network"""
        accounts = []
        for position, key in enumerate(config.private_keys):
            try:
                accounts.append(Account.from_key(key))
            except Exception as e:
                raise ConfigurationError(f"Private key #{position + 1} is malformed") from e

        provider = AsyncHTTPProvider(
            config.rpc_url,
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=config.rpc_timeout)},
        )
        web3 = AsyncWeb3(provider)
        context = cls(web3, ArtifactStore(config.artifacts_dir), accounts, config.network)

        try:
            if not await web3.is_connected():
                raise NetworkError(f"Failed to connect to {config.network} at {config.rpc_url}")
            if config.chain_id is not None:
                chain_id = await web3.eth.chain_id
                if chain_id != config.chain_id:
                    raise ConfigurationError(
                        f"Endpoint {config.rpc_url} serves chain {chain_id}, "
                        f"{config.network} expects {config.chain_id}"
                    )
        except RPC_ERRORS as e:
            await context.close()
            raise translate_rpc_error(e, f"connect to {config.network}") from e
        except DeploymentError:
            await context.close()
            raise

        logger.info(f"Connected to {config.network} ({config.rpc_url})")
        return context

    async def close(self):
        if isinstance(self.web3.provider, AsyncHTTPProvider):
            await self.web3.provider.disconnect()

    async def get_signers(self) -> List[Signer]:
        """Configured local accounts, falling back to the node's unlocked accounts"""
        if self.local_signers:
            return list(self.local_signers)
        try:
            accounts = await self.web3.eth.accounts
        except RPC_ERRORS as e:
            raise translate_rpc_error(e, "list node accounts") from e
        return [Signer(address=to_checksum_address(address)) for address in accounts]

    async def get_contract_factory(self, name: str, signer: Signer) -> ContractFactory:
        artifact = self.artifacts.load(name)
        return ContractFactory(self.web3, artifact, signer)
