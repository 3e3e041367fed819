"""Tests for the withdraw transaction and its canonical message."""

from dataclasses import replace

import pytest

from models.params import WITHDRAW_TX_TYPE
from models.tx import TimeRange, TxSignature, WithdrawTx
from primitives.packing import UnpackableAmount, pack_amount, pack_fee

FROM = b"\xaa" * 20
TO = b"\xbb" * 20


def _tx(**overrides) -> WithdrawTx:
    fields = dict(
        account_id=7, from_address=FROM, to_address=TO,
        token=2, amount=10000, fee=30, nonce=5,
    )
    fields.update(overrides)
    return WithdrawTx(**fields)


class TestMessage:
    """Test the canonical byte layout that gets signed."""

    def test_layout(self) -> None:
        msg = _tx().message()
        assert len(msg) == 74
        assert msg[0] == WITHDRAW_TX_TYPE
        assert msg[1:5] == (7).to_bytes(4, "big")
        assert msg[5:25] == FROM
        assert msg[25:45] == TO
        assert msg[45:47] == (2).to_bytes(2, "big")
        assert msg[47:52] == pack_amount(10000).to_bytes()
        assert msg[52:54] == pack_fee(30).to_bytes()
        assert msg[54:58] == (5).to_bytes(4, "big")

    def test_default_time_range(self) -> None:
        """No time range encodes as the widest window."""
        msg = _tx().message()
        assert msg[58:66] == bytes(8)
        assert msg[66:74] == b"\xff" * 8
        assert msg == _tx(time_range=TimeRange()).message()

    def test_custom_time_range(self) -> None:
        msg = _tx(time_range=TimeRange(100, 200)).message()
        assert int.from_bytes(msg[58:66], "big") == 100
        assert int.from_bytes(msg[66:74], "big") == 200

    def test_deterministic(self) -> None:
        assert _tx().message() == _tx().message()

    def test_every_field_is_bound(self) -> None:
        """Changing any signed field changes the message."""
        base = _tx().message()
        for change in (
            dict(account_id=8), dict(to_address=FROM), dict(token=3),
            dict(amount=20000), dict(fee=40), dict(nonce=6),
            dict(time_range=TimeRange(1, 2)),
        ):
            assert _tx(**change).message() != base, change

    def test_signature_not_part_of_message(self) -> None:
        sig = TxSignature(pub_key=bytes(32), signature=bytes(64))
        assert _tx().with_signature(sig).message() == _tx().message()

    def test_unpackable_amount(self) -> None:
        with pytest.raises(UnpackableAmount):
            _tx(amount=(1 << 35)).message()
        with pytest.raises(UnpackableAmount):
            _tx(fee=2048).message()


class TestTxFields:
    """Test construction-time validation and signature helpers."""

    def test_address_width(self) -> None:
        with pytest.raises(ValueError):
            _tx(from_address=b"\x00" * 19)
        with pytest.raises(ValueError):
            _tx(to_address=b"\x00" * 32)

    def test_signature_width(self) -> None:
        with pytest.raises(ValueError):
            TxSignature(pub_key=bytes(31), signature=bytes(64))
        with pytest.raises(ValueError):
            TxSignature(pub_key=bytes(32), signature=bytes(63))

    def test_signature_parts(self) -> None:
        """R is the first 32 bytes, S the little-endian scalar of the rest."""
        raw = bytes(range(32)) + (1234).to_bytes(32, "little")
        sig = TxSignature(pub_key=bytes(32), signature=raw)
        assert sig.r == bytes(range(32))
        assert sig.s == 1234

    def test_with_signature_is_a_copy(self) -> None:
        tx = _tx()
        signed = tx.with_signature(TxSignature(pub_key=bytes(32), signature=bytes(64)))
        assert tx.signature is None
        assert signed.signature is not None
        assert replace(signed, signature=None) == tx

    def test_time_range_contains(self) -> None:
        window = TimeRange(10, 20)
        assert window.contains(10) and window.contains(20)
        assert not window.contains(21)
