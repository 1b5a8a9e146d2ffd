"""Deployment tooling for the ETFMintToken contract"""

from etf_deploy.deploy import DeploymentResult, deploy_contract
from etf_deploy.errors import (
    ChainError,
    ConfigurationError,
    DeploymentError,
    DeploymentTimeoutError,
    NetworkError,
    NotFoundError,
    RejectedTransactionError,
)
from etf_deploy.network import ContractFactory, DeploymentHandle, NetworkContext
from etf_deploy.signers import Signer, first_signer, signer_at, signer_with_address

__version__ = "0.1.0"

__all__ = [
    "ChainError",
    "ConfigurationError",
    "ContractFactory",
    "DeploymentError",
    "DeploymentHandle",
    "DeploymentResult",
    "DeploymentTimeoutError",
    "NetworkContext",
    "NetworkError",
    "NotFoundError",
    "RejectedTransactionError",
    "Signer",
    "deploy_contract",
    "first_signer",
    "signer_at",
    "signer_with_address",
]
