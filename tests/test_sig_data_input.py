"""Tests for signature input assembly."""

from dataclasses import fields, replace

import pytest

from models.params import PUBKEY_HASH_WIDTH
from primitives.packing import UnpackableAmount
from witness import SigDataInput, pub_key_hash, verify_signature
from tests.utils import SigningAccount

TO = b"\x01" * 20


@pytest.fixture
def signer() -> SigningAccount:
    return SigningAccount(1)


@pytest.fixture
def signed_tx(signer):
    return signer.sign_withdraw(token=0, amount=7, fee=3, to=TO)


class TestBuild:
    """Test SigDataInput.build."""

    def test_fields_from_signed_tx(self, signed_tx) -> None:
        sig_input = SigDataInput.build(signed_tx)
        assert sig_input.message == signed_tx.message()
        assert sig_input.pub_key == signed_tx.signature.pub_key
        assert sig_input.signature == signed_tx.signature.signature
        assert verify_signature(sig_input)

    def test_deterministic(self, signed_tx) -> None:
        assert SigDataInput.build(signed_tx) == SigDataInput.build(signed_tx)

    def test_unsigned_tx(self, signed_tx) -> None:
        with pytest.raises(ValueError, match="not signed"):
            SigDataInput.build(replace(signed_tx, signature=None))

    def test_unpackable_amount(self, signed_tx) -> None:
        with pytest.raises(UnpackableAmount):
            SigDataInput.build(replace(signed_tx, amount=1 << 35))

    def test_other_signer_does_not_verify(self, signer, signed_tx) -> None:
        other = SigningAccount(2)
        sig_input = replace(SigDataInput.build(signed_tx), pub_key=other.pub_key)
        assert not verify_signature(sig_input)


class TestCorruptedVariations:
    """Test the single-field corruptions used by negative tests."""

    def test_each_variation_changes_one_field(self, signed_tx) -> None:
        sig_input = SigDataInput.build(signed_tx)
        expected_order = ["signature_r", "signature_s", "message", "pub_key"]
        variations = sig_input.corrupted_variations()
        assert len(variations) == 4
        for variation, name in zip(variations, expected_order):
            changed = [
                f.name for f in fields(SigDataInput)
                if getattr(variation, f.name) != getattr(sig_input, f.name)
            ]
            assert changed == [name]

    def test_all_variations_fail_verification(self, signed_tx) -> None:
        for variation in SigDataInput.build(signed_tx).corrupted_variations():
            assert not verify_signature(variation)

    def test_stable_order(self, signed_tx) -> None:
        sig_input = SigDataInput.build(signed_tx)
        assert sig_input.corrupted_variations() == sig_input.corrupted_variations()


def test_pub_key_hash_width(signer) -> None:
    assert len(pub_key_hash(signer.pub_key)) == PUBKEY_HASH_WIDTH
    assert pub_key_hash(signer.pub_key) == signer.pub_key_hash


def test_malformed_key_is_invalid(signed_tx) -> None:
    """A wrong-length key makes verification fail rather than raise."""
    sig_input = replace(SigDataInput.build(signed_tx), pub_key=b"\x00" * 31)
    assert not verify_signature(sig_input)
