"""
Deployment Errors
Error taxonomy for contract deployment and translation of client errors
"""

import asyncio
from typing import Optional

import aiohttp
from web3.exceptions import ContractLogicError, ProviderConnectionError, Web3RPCError


class DeploymentError(Exception):
    """Base class for every deployment failure"""


class ConfigurationError(DeploymentError):
    """No usable signer, network or settings"""


class NotFoundError(DeploymentError):
    """Contract artifact missing or not compiled"""


class NetworkError(DeploymentError):
    """RPC endpoint unreachable or connection dropped"""


class RejectedTransactionError(DeploymentError):
    """The node refused the deployment transaction"""

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason


class DeploymentTimeoutError(DeploymentError, TimeoutError):
    """Confirmation (or an RPC call) did not finish in time"""


class ChainError(DeploymentError):
    """The deployment transaction was included but failed on-chain"""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


# Exceptions raised by the web3/aiohttp client stack that translate_rpc_error understands
RPC_ERRORS = (
    asyncio.TimeoutError,
    aiohttp.ClientError,
    ConnectionError,
    ProviderConnectionError,
    Web3RPCError,
    ContractLogicError,
    ValueError,
)


def _rpc_message(exc: Exception) -> str:
    # Older clients raise ValueError({"code": ..., "message": ...})
    if exc.args and isinstance(exc.args[0], dict):
        return str(exc.args[0].get("message", exc.args[0]))
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__


def translate_rpc_error(exc: Exception, action: str) -> DeploymentError:
    """Map a client exception raised while doing `action` onto the deployment taxonomy"""
    if isinstance(exc, DeploymentError):
        return exc
    if isinstance(exc, asyncio.TimeoutError):
        return DeploymentTimeoutError(f"Timed out while trying to {action}")
    if isinstance(exc, (aiohttp.ClientError, ConnectionError, ProviderConnectionError)):
        return NetworkError(f"RPC unreachable while trying to {action}: {exc}")
    reason = _rpc_message(exc)
    return RejectedTransactionError(f"Node rejected request to {action}: {reason}", reason=reason)
