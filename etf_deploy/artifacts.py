"""
Contract Artifacts
Locates compiled contract interfaces (ABI + bytecode) produced by Hardhat or Foundry
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from etf_deploy.errors import ConfigurationError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractArtifact:
    contract_name: str
    abi: List[Dict]
    bytecode: str
    source_name: Optional[str] = None
    path: Optional[Path] = None

    @property
    def fully_qualified_name(self) -> str:
        if self.source_name:
            return f"{self.source_name}:{self.contract_name}"
        return self.contract_name


def _bytecode_of(data: Dict) -> str:
    bytecode = data.get("bytecode", "")
    # Foundry nests the hex under "object"
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object", "")
    if not isinstance(bytecode, str):
        return ""
    if bytecode and not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return bytecode


class ArtifactStore:
    """Reads contract artifacts from a build output directory"""

    def __init__(self, root: Union[str, Path] = "artifacts"):
        self.root = Path(root)

    def _candidates(self, name: str) -> List[Path]:
        if ":" in name:
            source_name, contract_name = name.rsplit(":", 1)
            path = self.root / source_name / f"{contract_name}.json"
            return [path] if path.is_file() else []
        return sorted(p for p in self.root.rglob(f"{name}.json") if p.is_file())

    def load(self, name: str) -> ContractArtifact:
        """Load the artifact for a contract name or fully qualified name"""
        if not self.root.is_dir():
            raise NotFoundError(
                f"Artifacts directory {self.root} does not exist, compile the contracts first"
            )

        candidates = self._candidates(name)
        if not candidates:
            raise NotFoundError(f"Artifact for contract {name} not found in {self.root}")
        if len(candidates) > 1:
            found = ", ".join(str(p.relative_to(self.root)) for p in candidates)
            raise NotFoundError(
                f"Multiple artifacts for contract {name} ({found}), use a fully qualified name"
            )

        path = candidates[0]
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise NotFoundError(f"Artifact {path} is unreadable: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("abi"), list):
            raise NotFoundError(f"Artifact {path} has no ABI")

        bytecode = _bytecode_of(data)
        if bytecode in ("", "0x"):
            raise NotFoundError(
                f"Contract {name} has no deployable bytecode (abstract contract or interface?)"
            )
        # Unlinked library references are "__$...$__" placeholders
        if "__" in bytecode:
            raise ConfigurationError(f"Contract {name} needs library linking before deployment")

        artifact = ContractArtifact(
            contract_name=data.get("contractName", name.rsplit(":", 1)[-1]),
            abi=data["abi"],
            bytecode=bytecode,
            source_name=data.get("sourceName"),
            path=path,
        )
        logger.debug(f"Loaded artifact {artifact.fully_qualified_name} from {path}")
        return artifact
