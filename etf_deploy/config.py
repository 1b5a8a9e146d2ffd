"""
Deployment Configuration
Network table and environment-driven settings for the deployer
"""

import math
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv

from etf_deploy.errors import ConfigurationError

DEFAULT_NETWORK = "localhost"
DEFAULT_CONTRACT = "ETFMintToken"

# Network configurations
NETWORK_CONFIGS: Dict[str, Dict] = {
    "localhost": {
        "rpc": "http://127.0.0.1:8545",
        "explorer": None,
        "chain_id": 31337
    },
    "hardhat": {
        "rpc": "http://127.0.0.1:8545",
        "explorer": None,
        "chain_id": 31337
    },
    "sepolia": {
        "rpc": "https://rpc.sepolia.org",
        "explorer": "https://sepolia.etherscan.io",
        "chain_id": 11155111
    },
    "polygon": {
        "rpc": "https://polygon-rpc.com",
        "explorer": "https://polygonscan.com",
        "chain_id": 137
    },
    "bsc": {
        "rpc": "https://bsc-dataseed.binance.org",
        "explorer": "https://bscscan.com",
        "chain_id": 56
    },
    "avalanche": {
        "rpc": "https://api.avax.network/ext/bc/C/rpc",
        "explorer": "https://snowtrace.io",
        "chain_id": 43114
    }
}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {raw!r}")
    return value


def _private_keys(network: str) -> List[str]:
    raw = os.getenv(f"{network.upper()}_PRIVATE_KEY") or os.getenv("PRIVATE_KEY") or ""
    return [key.strip() for key in raw.split(",") if key.strip()]


@dataclass
class DeployConfig:
    network: str
    rpc_url: str
    chain_id: Optional[int] = None
    explorer: Optional[str] = None
    private_keys: List[str] = field(default_factory=list, repr=False)
    artifacts_dir: str = "artifacts"
    contract_name: str = DEFAULT_CONTRACT
    timeout: float = 120.0
    confirmations: int = 1
    rpc_timeout: float = 30.0
    slack_webhook: Optional[str] = field(default=None, repr=False)
    deployments_file: Optional[str] = None

    @classmethod
    def from_env(cls, network: Optional[str] = None, load_env_file: bool = True) -> "DeployConfig":
        """Build the configuration from the environment (and `.env` when present)"""
        if load_env_file:
            load_dotenv()

        network = network or os.getenv("DEPLOY_NETWORK", DEFAULT_NETWORK)
        network_config = NETWORK_CONFIGS.get(network, {})
        rpc_url = (
            os.getenv("DEPLOY_RPC_URL")
            or os.getenv(f"{network.upper()}_RPC")
            or network_config.get("rpc")
        )
        if not rpc_url:
            raise ConfigurationError(
                f"Unsupported network: {network} (set DEPLOY_RPC_URL to use a custom endpoint)"
            )

        return cls(
            network=network,
            rpc_url=rpc_url,
            chain_id=network_config.get("chain_id"),
            explorer=network_config.get("explorer"),
            private_keys=_private_keys(network),
            artifacts_dir=os.getenv("ARTIFACTS_DIR", "artifacts"),
            contract_name=os.getenv("DEPLOY_CONTRACT", DEFAULT_CONTRACT),
            timeout=_env_float("DEPLOY_TIMEOUT", 120.0),
            confirmations=_env_int("DEPLOY_CONFIRMATIONS", 1),
            rpc_timeout=_env_float("RPC_TIMEOUT", 30.0),
            slack_webhook=os.getenv("SLACK_WEBHOOK_URL") or None,
            deployments_file=os.getenv("DEPLOYMENTS_FILE") or None,
        )

    def get_explorer_url(self, address: str) -> Optional[str]:
        """Get explorer URL for a deployed contract"""
        if not self.explorer:
            return None
        return f"{self.explorer}/address/{address}"
