"""RoundClient behaviour against a fake contract."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import patch

import httpx
import pytest

from b3tr_round.chain.rpc import RpcError
from b3tr_round.client import RoundClient, UnclaimedAllocations
from b3tr_round.errors import (
    ConfigurationError,
    RemoteReadError,
    RemoteWriteError,
    TransactionRevertedError,
)

from conftest import app_id


@pytest.fixture()
def client(fake_contract, local_network, account) -> RoundClient:
    return RoundClient(local_network, account=account)


class TestReads:
    def test_reads_go_to_configured_address(self, client: RoundClient, fake_contract) -> None:
        assert client.get_current_round_id() == 1
        address, function_name, args = fake_contract.reads[-1]
        assert address == "0xe32f25c825b8515ade62541cf6cc195c0e211855"
        assert function_name == "getCurrentRoundId"
        assert args == []

    def test_previous_round_sentinel(self, client: RoundClient) -> None:
        assert client.get_previous_round_id() == 0

    def test_all_apps_preserve_order(self, client: RoundClient) -> None:
        assert client.get_all_apps_for_round(1) == [app_id(1), app_id(2), app_id(3)]

    def test_unknown_round_is_empty(self, client: RoundClient) -> None:
        assert client.get_all_apps_for_round(99) == []

    def test_unclaimed_with_amounts_parallel(self, client: RoundClient) -> None:
        allocations = client.get_unclaimed_apps_with_amounts(1)
        assert isinstance(allocations, UnclaimedAllocations)
        assert len(allocations.app_ids) == len(allocations.amounts) == 3
        assert allocations.items()[2] == (app_id(3), 25 * 10**17)

    def test_unequal_lengths_rejected(self, client: RoundClient, fake_contract) -> None:
        def mismatched(*args, **kwargs):
            return ((app_id(1),), ())

        with patch("b3tr_round.client.read_contract", mismatched):
            with pytest.raises(RemoteReadError) as exc_info:
                client.get_unclaimed_apps_with_amounts(4)
        assert exc_info.value.round_id == 4

    def test_non_zero_is_ordered_subsequence(self, client: RoundClient) -> None:
        all_apps = client.get_all_apps_for_round(1)
        allocations = client.get_unclaimed_apps_with_amounts(1)
        amounts = dict(allocations.items())
        expected = [
            a for a in all_apps
            if a in amounts and amounts[a] > 0 and not client.has_app_claimed(1, a)
        ]
        assert client.get_unclaimed_apps_with_non_zero_amounts(1) == expected
        assert expected == [app_id(1), app_id(3)]

    def test_has_claimed_idempotent(self, client: RoundClient) -> None:
        first = client.has_app_claimed(1, app_id(1))
        assert all(client.has_app_claimed(1, app_id(1)) == first for _ in range(3))

    def test_check_dependencies(self, client: RoundClient, fake_contract) -> None:
        deps = client.check_dependencies()
        assert deps.emissions == fake_contract.dependencies["emissions"]
        assert deps.x2_earn_apps == fake_contract.dependencies["x2EarnApps"]
        assert [r[1] for r in fake_contract.reads] == [
            "emissions",
            "xAllocationPool",
            "xAllocationVoting",
            "x2EarnApps",
        ]

    @pytest.mark.parametrize(
        "error",
        [RpcError("RPC error: execution reverted", code=3), httpx.ConnectError("refused")],
    )
    def test_read_failures_carry_context(self, client: RoundClient, fake_contract, error) -> None:
        fake_contract.read_error = error
        with pytest.raises(RemoteReadError) as exc_info:
            client.has_app_claimed(3, app_id(7))
        exc = exc_info.value
        assert exc.operation == "hasXAppClaimed"
        assert exc.round_id == 3
        assert exc.app_id == "0x" + app_id(7).hex()
        assert "round=3" in str(exc)


class TestWrites:
    def test_claim_marks_apps_claimed(self, client: RoundClient) -> None:
        assert client.has_app_claimed(1, app_id(1)) is False
        result = client.claim_allocations_for_round(1)
        assert result.tx_hash.startswith("0x")
        assert client.has_app_claimed(1, app_id(1)) is True
        assert client.get_unclaimed_apps_with_non_zero_amounts(1) == []

    def test_claimed_flag_never_reverts(self, client: RoundClient) -> None:
        client.claim_allocations_for_round(1)
        client.start_new_round_and_distribute_allocations()
        client.claim_allocations_for_round(1)
        assert client.has_app_claimed(1, app_id(3)) is True

    def test_start_new_round_is_monotonic(self, client: RoundClient) -> None:
        before = client.get_current_round_id()
        client.start_new_round_and_distribute_allocations()
        assert client.get_current_round_id() == before + 1
        assert client.get_previous_round_id() == before

    def test_claim_previous_round_resolves_id(self, client: RoundClient, fake_contract) -> None:
        client.start_new_round_and_distribute_allocations()
        round_id, result = client.claim_allocations_for_previous_round()
        assert round_id == 1
        assert fake_contract.writes[-1][1] == "claimAllocationsForPreviousRound"
        assert client.has_app_claimed(1, app_id(1)) is True

    def test_revert_surfaces(self, client: RoundClient, fake_contract) -> None:
        fake_contract.revert_writes = True
        with pytest.raises(TransactionRevertedError) as exc_info:
            client.claim_allocations_for_round(5)
        assert exc_info.value.round_id == 5
        assert exc_info.value.tx_hash in str(exc_info.value)

    def test_submission_failure(self, client: RoundClient, fake_contract) -> None:
        def boom(*args, **kwargs):
            raise TimeoutError("Transaction 0xabc not confirmed within 120s")

        with patch("b3tr_round.client.send_contract_tx", boom):
            with pytest.raises(RemoteWriteError) as exc_info:
                client.claim_allocations_for_round(2)
        assert exc_info.value.operation == "claimAllocationsForRound"

    def test_write_requires_account(self, fake_contract, local_network) -> None:
        client = RoundClient(local_network)
        with pytest.raises(ConfigurationError):
            client.start_new_round_and_distribute_allocations()
        assert fake_contract.writes == []


def _node_contacted(*args, **kwargs):
    raise AssertionError("node contacted")


class TestMalformedExchanges:
    """Replies eth-abi cannot decode and arguments it cannot encode."""

    def test_short_reply_over_json_rpc(self, local_network) -> None:
        client = RoundClient(replace(local_network, protocol="jsonrpc"))
        with patch("b3tr_round.chain.rpc.rpc_call", lambda *a, **k: "0x1234"):
            with pytest.raises(RemoteReadError) as exc_info:
                client.get_current_round_id()
        assert exc_info.value.operation == "getCurrentRoundId"

    def test_short_reply_over_thor(self, local_network) -> None:
        client = RoundClient(local_network)
        reply = [{"data": "0x1234", "reverted": False, "vmError": ""}]
        with patch("b3tr_round.chain.thor.thor_request", lambda *a, **k: reply):
            with pytest.raises(RemoteReadError) as exc_info:
                client.get_all_apps_for_round(2)
        assert exc_info.value.operation == "getAllXAppsForRound"
        assert exc_info.value.round_id == 2

    def test_oversized_round_id_read(self, local_network) -> None:
        client = RoundClient(local_network)
        with patch("b3tr_round.chain.thor.thor_request", _node_contacted):
            with pytest.raises(RemoteReadError) as exc_info:
                client.get_unclaimed_apps_for_round(2**256)
        assert exc_info.value.round_id == 2**256

    def test_oversized_round_id_write(self, local_network, account) -> None:
        client = RoundClient(local_network, account=account)
        with patch("b3tr_round.chain.thor.thor_request", _node_contacted):
            with pytest.raises(RemoteWriteError) as exc_info:
                client.claim_allocations_for_round(2**256)
        assert exc_info.value.operation == "claimAllocationsForRound"
