"""
ABI Loader - Packaged ABIs and Hardhat compilation artifacts.

The B3trRound ABI ships with the package so operational commands work
without a local build. Deployment needs bytecode, which only exists in
Hardhat's artifacts/ directory (``npx hardhat compile``).
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

_PACKAGED_ABIS = Path(__file__).resolve().parent / "abis"


def find_artifacts_dir(start: Optional[Path] = None) -> Path:
    """
    Locate the Hardhat artifacts/ directory.

    ``B3TR_ARTIFACTS_DIR`` wins; otherwise searches from ``start``
    (default: cwd) upward.
    """
    configured = os.environ.get("B3TR_ARTIFACTS_DIR")
    if configured:
        path = Path(configured).expanduser()
        if not path.is_dir():
            raise FileNotFoundError(f"B3TR_ARTIFACTS_DIR does not exist: {path}")
        return path

    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        candidate = parent / "artifacts"
        if candidate.is_dir():
            return candidate
    raise FileNotFoundError(
        "Cannot find artifacts/. Run 'npx hardhat compile' in the contracts project "
        "or set B3TR_ARTIFACTS_DIR."
    )


@lru_cache(maxsize=16)
def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_artifact(contract_name: str, artifacts_dir: Optional[Path] = None) -> dict[str, Any]:
    """
    Load a Hardhat artifact (``<name>.json``, not the ``.dbg.json`` sidecar).

    Raises:
        FileNotFoundError: If no artifact with that contract name exists
    """
    root = artifacts_dir or find_artifacts_dir()
    matches = sorted(
        p for p in root.rglob(f"{contract_name}.json") if not p.name.endswith(".dbg.json")
    )
    if not matches:
        raise FileNotFoundError(
            f"Artifact not found for {contract_name} under {root}. "
            f"Run 'npx hardhat compile'."
        )
    return _read_json(matches[0])


def load_abi(contract_name: str, artifacts_dir: Optional[Path] = None) -> list[dict[str, Any]]:
    """
    Load ABI for a contract.

    Packaged ABIs are preferred; anything else comes from artifacts.
    """
    packaged = _PACKAGED_ABIS / f"{contract_name}.json"
    if packaged.exists():
        return _read_json(packaged)
    return load_artifact(contract_name, artifacts_dir)["abi"]


def load_bytecode(contract_name: str, artifacts_dir: Optional[Path] = None) -> str:
    """
    Load deployment bytecode for a contract.

    Returns:
        0x-prefixed hex bytecode
    """
    artifact = load_artifact(contract_name, artifacts_dir)
    bytecode = artifact.get("bytecode", "")
    # Foundry-style artifacts nest the hex under "object"
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object", "")
    if not bytecode or bytecode == "0x":
        raise ValueError(f"No bytecode in artifact for {contract_name}")
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return bytecode


def find_entry(abi: list, name: str, entry_type: str = "function") -> dict[str, Any]:
    """Find a function (or constructor, with name ignored) in an ABI."""
    for entry in abi:
        if entry.get("type") != entry_type:
            continue
        if entry_type == "constructor" or entry.get("name") == name:
            return entry
    raise ValueError(f"{entry_type.capitalize()} {name} not found in ABI")


def b3tr_round_abi() -> list[dict[str, Any]]:
    """Load B3trRound ABI."""
    return load_abi("B3trRound")
