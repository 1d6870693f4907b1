"""
RoundClient - thin, stateless wrapper around a deployed B3trRound proxy.

Each method is a single remote call (or one transaction plus its receipt).
Round progression, allocation amounts and claim eligibility are decided by
the contract; the client never re-derives them. Nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from eth_abi.exceptions import DecodingError, EncodingError
from eth_account.signers.local import LocalAccount

from .chain.abi import b3tr_round_abi
from .chain.rpc import RpcError
from .chain.tx import ChainTarget, TxResult, read_contract, send_contract_tx
from .config import NetworkConfig
from .errors import (
    ConfigurationError,
    RemoteReadError,
    RemoteWriteError,
    TransactionRevertedError,
)
from .utils import format_app_id

logger = logging.getLogger(__name__)

# getPreviousRoundId() answers 0 until a second round has been started.
NO_PREVIOUS_ROUND = 0


@dataclass(frozen=True)
class ContractDependencies:
    emissions: str
    x_allocation_pool: str
    x_allocation_voting: str
    x2_earn_apps: str


@dataclass(frozen=True)
class UnclaimedAllocations:
    """Parallel sequences: ``amounts[i]`` is claimable by ``app_ids[i]``."""

    app_ids: tuple[bytes, ...]
    amounts: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.app_ids)

    def items(self) -> list[tuple[bytes, int]]:
        return list(zip(self.app_ids, self.amounts))


class RoundClient:
    """Operations against the B3trRound contract on one network."""

    def __init__(
        self,
        network: NetworkConfig,
        account: Optional[LocalAccount] = None,
        abi: Optional[list] = None,
    ) -> None:
        self.network = network
        self.account = account
        self.abi = abi if abi is not None else b3tr_round_abi()

    @property
    def address(self) -> str:
        return self.network.contract_address

    @property
    def target(self) -> ChainTarget:
        return ChainTarget.from_network(self.network)

    # ---------------------------------------------------------------- reads

    def _read(
        self,
        function_name: str,
        args: Optional[list] = None,
        round_id: Optional[int] = None,
        app_id: Optional[bytes] = None,
    ) -> Any:
        try:
            return read_contract(
                self.address,
                function_name,
                self.abi,
                self.target,
                args=args,
            )
        except (RpcError, httpx.HTTPError, ValueError, DecodingError, EncodingError) as exc:
            raise RemoteReadError(
                f"Read failed: {exc}",
                operation=function_name,
                round_id=round_id,
                app_id=format_app_id(app_id) if app_id is not None else None,
            ) from exc

    def get_current_round_id(self) -> int:
        return self._read("getCurrentRoundId")

    def get_previous_round_id(self) -> int:
        return self._read("getPreviousRoundId")

    def get_all_apps_for_round(self, round_id: int) -> list[bytes]:
        return list(self._read("getAllXAppsForRound", [round_id], round_id=round_id))

    def get_unclaimed_apps_for_round(self, round_id: int) -> list[bytes]:
        return list(self._read("getUnclaimedXAppsForRound", [round_id], round_id=round_id))

    def get_unclaimed_apps_for_previous_round(self) -> list[bytes]:
        return list(self._read("getUnclaimedXAppsForPreviousRound"))

    def get_unclaimed_apps_with_amounts(self, round_id: int) -> UnclaimedAllocations:
        app_ids, amounts = self._read(
            "getUnclaimedXAppsWithAmounts", [round_id], round_id=round_id
        )
        if len(app_ids) != len(amounts):
            raise RemoteReadError(
                f"Contract returned {len(app_ids)} app ids but {len(amounts)} amounts",
                operation="getUnclaimedXAppsWithAmounts",
                round_id=round_id,
            )
        return UnclaimedAllocations(app_ids=tuple(app_ids), amounts=tuple(amounts))

    def get_unclaimed_apps_with_non_zero_amounts(self, round_id: int) -> list[bytes]:
        return list(
            self._read("getUnclaimedXAppsWithNonZeroAmounts", [round_id], round_id=round_id)
        )

    def has_app_claimed(self, round_id: int, app_id: bytes) -> bool:
        return bool(
            self._read("hasXAppClaimed", [round_id, app_id], round_id=round_id, app_id=app_id)
        )

    def check_dependencies(self) -> ContractDependencies:
        return ContractDependencies(
            emissions=self._read("emissions"),
            x_allocation_pool=self._read("xAllocationPool"),
            x_allocation_voting=self._read("xAllocationVoting"),
            x2_earn_apps=self._read("x2EarnApps"),
        )

    # --------------------------------------------------------------- writes

    def _write(
        self,
        function_name: str,
        args: Optional[list] = None,
        round_id: Optional[int] = None,
    ) -> TxResult:
        if self.account is None:
            raise ConfigurationError(
                "A signing account is required for state-changing calls",
                operation=function_name,
                round_id=round_id,
            )

        try:
            result = send_contract_tx(
                self.address,
                function_name,
                args or [],
                self.abi,
                self.account,
                self.target,
            )
        except (RpcError, httpx.HTTPError, TimeoutError, ValueError, EncodingError) as exc:
            raise RemoteWriteError(
                f"Transaction failed: {exc}",
                operation=function_name,
                round_id=round_id,
            ) from exc

        if not result.succeeded:
            raise TransactionRevertedError(
                "Transaction reverted",
                tx_hash=result.tx_hash,
                operation=function_name,
                round_id=round_id,
            )

        logger.info("%s confirmed in %s", function_name, result.tx_hash)
        return result

    def claim_allocations_for_round(self, round_id: int) -> TxResult:
        return self._write("claimAllocationsForRound", [round_id], round_id=round_id)

    def claim_allocations_for_previous_round(
        self, round_id: Optional[int] = None
    ) -> tuple[int, TxResult]:
        """
        Claim for the previous round; returns the round id it resolved to.

        ``round_id`` is a previously read getPreviousRoundId() value, used
        for reporting only; the contract resolves the round itself.
        """
        if round_id is None:
            round_id = self.get_previous_round_id()
        return round_id, self._write("claimAllocationsForPreviousRound", round_id=round_id)

    def start_new_round_and_distribute_allocations(self) -> TxResult:
        return self._write("startNewRoundAndDistributeAllocations")
