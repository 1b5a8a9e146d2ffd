"""
Signers
Signing accounts and the strategies used to pick the deployer
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from eth_account.signers.local import LocalAccount
from eth_utils import is_address, to_checksum_address

from etf_deploy.errors import ConfigurationError


@dataclass(frozen=True)
class Signer:
    address: str
    # None when the node holds the key (eth_accounts)
    account: Optional[LocalAccount] = field(default=None, repr=False, compare=False)

    @property
    def is_local(self) -> bool:
        return self.account is not None

    @classmethod
    def from_account(cls, account: LocalAccount) -> "Signer":
        return cls(address=to_checksum_address(account.address), account=account)


DeployerSelector = Callable[[Sequence[Signer]], Signer]


def first_signer(signers: Sequence[Signer]) -> Signer:
    """Pick the first available signer"""
    if not signers:
        raise ConfigurationError(
            "No signer available: configure a private key or connect to a node with unlocked accounts"
        )
    return signers[0]


def signer_at(index: int) -> DeployerSelector:
    def select(signers: Sequence[Signer]) -> Signer:
        if index < 0 or index >= len(signers):
            raise ConfigurationError(
                f"No signer at index {index} ({len(signers)} signer(s) available)"
            )
        return signers[index]

    return select


def signer_with_address(address: str) -> DeployerSelector:
    if not is_address(address):
        raise ConfigurationError(f"Invalid deployer address: {address}")
    wanted = to_checksum_address(address)

    def select(signers: Sequence[Signer]) -> Signer:
        for signer in signers:
            if signer.address == wanted:
                return signer
        raise ConfigurationError(f"No signer for address {wanted}")

    return select
