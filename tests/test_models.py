"""Tests for value types and JSON-RPC parsing."""

from __future__ import annotations

import pytest

from ipckit.errors import SchemaError
from ipckit.models import (
    Address,
    BlockInfo,
    BlockTag,
    Hash,
    NetworkEndpoint,
    Transaction,
    TransactionReceipt,
    block_tag,
)

from conftest import tx_hash

SENDER = "0xab5c8051b9a1df1aab0149f8b0630848b7ecabf6"
OTHER = "0x2cc31912b2b0f3075a87b3640923d45a26cef3ee"


class TestBlockTag:
    """Symbolic tags keep their names, explicit numbers become quantities."""

    @pytest.mark.parametrize(
        "tag, expected",
        [
            (BlockTag.PENDING, "pending"),
            (BlockTag.LATEST, "latest"),
            (BlockTag.EARLIEST, "earliest"),
            (0, "0x0"),
            (12345, "0x3039"),
        ],
    )
    def test_wire_form(self, tag: object, expected: str) -> None:
        assert block_tag(tag) == expected  # type: ignore[arg-type]

    def test_rejects_negative(self) -> None:
        with pytest.raises(ValueError):
            block_tag(-1)

    def test_rejects_bool(self) -> None:
        with pytest.raises(TypeError):
            block_tag(True)


class TestAddress:
    def test_equality_ignores_case_and_public_key(self) -> None:
        a = Address.from_hex(SENDER)
        b = Address.from_hex(SENDER.upper().replace("0X", "0x"), public_key="0x04ab")
        assert a == b

    def test_checksum_and_str(self) -> None:
        address = Address.from_hex(SENDER)
        assert address.checksum.lower() == SENDER
        assert str(address) == address.checksum
        assert address.hex == SENDER

    def test_zero(self) -> None:
        assert Address.zero().is_zero
        assert not Address.from_hex(SENDER).is_zero

    def test_wrong_length(self) -> None:
        with pytest.raises(ValueError):
            Address.from_hex("0x1234")


class TestHash:
    def test_from_hex(self) -> None:
        value = Hash.from_hex(tx_hash(1))
        assert value.hex == tx_hash(1)
        assert not value.is_zero

    def test_zero(self) -> None:
        assert Hash.zero().is_zero
        assert Hash.from_hex("0x" + "0" * 64).is_zero

    @pytest.mark.parametrize("value", [None, "0x1234", "ab" * 32, "0x" + "zz" * 32])
    def test_malformed_is_schema_error(self, value: object) -> None:
        with pytest.raises(SchemaError):
            Hash.from_hex(value)


class TestTransaction:
    def test_rpc_object_omits_empty_fields(self) -> None:
        tx = Transaction(from_address=Address.from_hex(SENDER))
        assert tx.to_rpc_object() == {"from": Address.from_hex(SENDER).checksum}

    def test_rpc_object(self) -> None:
        tx = Transaction(
            from_address=Address.from_hex(SENDER),
            to_address=Address.from_hex(OTHER),
            value=1,
            data=b"\x12\x34",
            gas_limit=350_000,
            gas_price=20,
        )
        obj = tx.to_rpc_object()
        assert obj["to"] == Address.from_hex(OTHER).checksum
        assert obj["value"] == "0x1"
        assert obj["data"] == "0x1234"
        assert obj["gas"] == "0x55730"
        assert obj["gasPrice"] == "0x14"

    def test_signable_requires_nonce(self) -> None:
        tx = Transaction(from_address=Address.from_hex(SENDER))
        with pytest.raises(ValueError):
            tx.to_signable()

    def test_signable_carries_chain_id_when_set(self) -> None:
        tx = Transaction(from_address=Address.from_hex(SENDER), nonce=3, chain_id=4)
        signable = tx.to_signable()
        assert signable["nonce"] == 3
        assert signable["chainId"] == 4
        assert "to" not in signable


class TestReceipt:
    def test_empty_is_pending(self) -> None:
        assert TransactionReceipt.empty().pending

    def test_from_rpc(self) -> None:
        receipt = TransactionReceipt.from_rpc(
            {
                "transactionHash": tx_hash(7),
                "blockNumber": "0x3039",
                "status": "0x1",
                "logs": [{"address": OTHER, "data": "0x", "topics": [tx_hash(1)]}],
            }
        )
        assert receipt.block_number == 12345
        assert receipt.status == 1
        assert not receipt.pending
        assert receipt.logs[0].topics == (tx_hash(1),)

    @pytest.mark.parametrize(
        "log",
        [
            {"data": "0x", "topics": [1]},
            {"data": "0x", "topics": ["0x" + "11" * 19]},
            {"data": "0x", "topics": ["0x" + "zz" * 32]},
            {"data": 7, "topics": []},
            {"data": "0xnothex", "topics": []},
        ],
    )
    def test_malformed_log_is_schema_error(self, log: dict) -> None:
        with pytest.raises(SchemaError):
            TransactionReceipt.from_rpc({"transactionHash": tx_hash(7), "blockNumber": "0x1", "logs": [log]})

    def test_null_block_number_is_pending(self) -> None:
        receipt = TransactionReceipt.from_rpc({"transactionHash": tx_hash(7), "blockNumber": None})
        assert receipt.pending

    def test_not_an_object(self) -> None:
        with pytest.raises(SchemaError):
            TransactionReceipt.from_rpc("0x1")


class TestBlock:
    def test_keeps_full_transactions_only(self) -> None:
        block = BlockInfo.from_rpc(
            {
                "number": "0x10",
                "hash": tx_hash(16),
                "transactions": [
                    {"hash": tx_hash(1), "from": SENDER, "to": OTHER, "value": "0x0", "blockNumber": "0x10"},
                    tx_hash(2),
                ],
            }
        )
        assert block.number == 16
        assert len(block.transactions) == 1
        assert block.transactions[0].touches(Address.from_hex(OTHER))


class TestNetworkEndpoint:
    def test_contract_addresses(self) -> None:
        endpoint = NetworkEndpoint(name="x", network_id=4, rpc_url="http://x", registry_address=OTHER)
        assert endpoint.identity_manager() is None
        assert endpoint.registry() == Address.from_hex(OTHER)
        assert endpoint.mnid_chain_id == b"\x04"
        assert not endpoint.has_faucet
