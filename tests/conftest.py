"""
Shared fixtures.

``FakeRoundContract`` stands in for the deployed contract: it answers the
same method names with the same Python shapes eth-abi produces, and keeps
just enough state (rounds, amounts, claimed flags) for the client's
observable properties to be checked without a node.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
from unittest.mock import patch

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount

from b3tr_round.chain.tx import TxResult
from b3tr_round.config import NETWORKS


def app_id(n: int) -> bytes:
    return n.to_bytes(32, "big")


class FakeRoundContract:
    def __init__(self) -> None:
        self.current_round = 1
        self.previous_round = 0
        self.apps: dict[int, list[bytes]] = {1: [app_id(1), app_id(2), app_id(3)]}
        self.amounts: dict[tuple[int, bytes], int] = {
            (1, app_id(1)): 10**18,
            (1, app_id(2)): 0,
            (1, app_id(3)): 25 * 10**17,
        }
        self.claimed: set[tuple[int, bytes]] = set()
        self.dependencies = {
            "emissions": "0x475936657ED1C6dA36880218662fd6FEB362Fe3c",
            "xAllocationPool": "0x1A98dB0a37b040c00BE156ef2Fc81983F65a7FbC",
            "xAllocationVoting": "0xE5B2794C12432459D1a2739D7020E75A54caa930",
            "x2EarnApps": "0x5A08024DcCF4bd6a77A22e9FaD2e7Da3C307B01E",
        }
        self.reads: list[tuple[str, str, list]] = []
        self.writes: list[tuple[str, str, list]] = []
        self.revert_writes = False
        self.read_error: Optional[Exception] = None

    # -- remote views

    def _unclaimed(self, round_id: int) -> list[bytes]:
        return [a for a in self.apps.get(round_id, []) if (round_id, a) not in self.claimed]

    def read(
        self,
        contract_address: str,
        function_name: str,
        abi: list,
        target: Any,
        args: Optional[list] = None,
    ) -> Any:
        args = list(args or [])
        self.reads.append((contract_address, function_name, args))
        if self.read_error is not None:
            raise self.read_error

        if function_name in self.dependencies:
            return self.dependencies[function_name]
        if function_name == "getCurrentRoundId":
            return self.current_round
        if function_name == "getPreviousRoundId":
            return self.previous_round
        if function_name == "getAllXAppsForRound":
            return tuple(self.apps.get(args[0], []))
        if function_name == "getUnclaimedXAppsForRound":
            return tuple(self._unclaimed(args[0]))
        if function_name == "getUnclaimedXAppsForPreviousRound":
            return tuple(self._unclaimed(self.previous_round))
        if function_name == "getUnclaimedXAppsWithAmounts":
            apps = self._unclaimed(args[0])
            return (tuple(apps), tuple(self.amounts[(args[0], a)] for a in apps))
        if function_name == "getUnclaimedXAppsWithNonZeroAmounts":
            return tuple(a for a in self._unclaimed(args[0]) if self.amounts[(args[0], a)] > 0)
        if function_name == "hasXAppClaimed":
            return (args[0], args[1]) in self.claimed
        raise AssertionError(f"unexpected read {function_name}")

    # -- remote transactions

    def _claim(self, round_id: int) -> None:
        for a in self._unclaimed(round_id):
            if self.amounts[(round_id, a)] > 0:
                self.claimed.add((round_id, a))

    def send(
        self,
        contract_address: str,
        function_name: str,
        args: list,
        abi: list,
        account: LocalAccount,
        target: Any,
        gas_limit: Optional[int] = None,
        wait: bool = True,
    ) -> TxResult:
        self.writes.append((contract_address, function_name, list(args)))
        tx_hash = "0x" + f"{len(self.writes):064x}"
        if self.revert_writes:
            return TxResult(tx_hash=tx_hash, receipt={"status": "0x0"}, status=0)

        if function_name == "claimAllocationsForRound":
            self._claim(args[0])
        elif function_name == "claimAllocationsForPreviousRound":
            self._claim(self.previous_round)
        elif function_name == "startNewRoundAndDistributeAllocations":
            self.previous_round = self.current_round
            self.current_round += 1
            new = self.current_round
            self.apps[new] = [app_id(1), app_id(2)]
            self.amounts[(new, app_id(1))] = 3 * 10**18
            self.amounts[(new, app_id(2))] = 10**18
        else:
            raise AssertionError(f"unexpected write {function_name}")
        return TxResult(tx_hash=tx_hash, receipt={"status": "0x1"}, status=1)


@pytest.fixture()
def fake_contract() -> FakeRoundContract:
    contract = FakeRoundContract()
    with patch("b3tr_round.client.read_contract", contract.read):
        with patch("b3tr_round.client.send_contract_tx", contract.send):
            yield contract


@pytest.fixture()
def account() -> LocalAccount:
    return Account.from_key("0x" + "11" * 32)


@pytest.fixture()
def local_network():
    return NETWORKS["local-development"]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep developer credentials and overrides out of the tests."""
    for key in (
        "MNEMONIC",
        "TESTNET_MNEMONIC",
        "MAINNET_MNEMONIC",
        "PRIVATE_KEY",
        "B3TR_NETWORK",
        "B3TR_RPC_URL",
        "B3TR_RPC_PROTOCOL",
        "B3TR_RPC_TIMEOUT",
        "B3TR_TX_TIMEOUT",
        "B3TR_ACCOUNT_INDEX",
        "B3TR_ARTIFACTS_DIR",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("B3TR_ENV_FILE", str(tmp_path / "missing.env"))
