"""
Contract Deployment
Deploys one contract instance and waits until it is confirmed
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from etf_deploy.config import DEFAULT_CONTRACT
from etf_deploy.signers import DeployerSelector, first_signer

logger = logging.getLogger(__name__)


@dataclass
class DeploymentResult:
    contract_name: str
    address: str
    deployer: str
    tx_hash: str
    block_number: Optional[int] = None
    network: Optional[str] = None
    explorer_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = datetime.now().isoformat()
        return data


async def deploy_contract(context, contract_name: str = DEFAULT_CONTRACT,
                          select_deployer: DeployerSelector = first_signer,
                          constructor_args: Sequence[Any] = (),
                          timeout: float = 120.0, confirmations: int = 1,
                          poll_interval: float = 0.5) -> DeploymentResult:
    """Deploy `contract_name` through `context` and wait for confirmation

    `context` provides get_signers() and get_contract_factory(name, signer);
    NetworkContext is the web3-backed implementation. Any failure is logged
    and re-raised, nothing is retried.
    """
    try:
        # Get the deployer account
        signers = await context.get_signers()
        deployer = select_deployer(signers)
        logger.info(f"Deploying contracts with the account: {deployer.address}")

        factory = await context.get_contract_factory(contract_name, deployer)
        handle = await factory.deploy(*constructor_args)
        logger.info(f"{contract_name} deployment sent: {handle.tx_hash}")

        await handle.wait_for_deployment(
            timeout=timeout, confirmations=confirmations, poll_interval=poll_interval
        )
    except Exception as e:
        logger.error(f"Failed to deploy {contract_name}: {e}")
        raise

    receipt = handle.receipt or {}
    result = DeploymentResult(
        contract_name=contract_name,
        address=handle.address,
        deployer=deployer.address,
        tx_hash=handle.tx_hash,
        block_number=receipt.get("blockNumber"),
        network=getattr(context, "network", None),
    )
    logger.info(f"{contract_name} deployed to: {result.address}")
    return result
