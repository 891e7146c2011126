import hashlib
import hmac

from app.core.security import MAX_RECEIPT_LENGTH, generate_receipt, payment_signature, verify_payment_signature

SECRET = "s3cret"


def test_signature_matches_reference_hmac():
    expected = hmac.new(b"s3cret", b"order_1|pay_1", hashlib.sha256).hexdigest()
    assert payment_signature(SECRET, "order_1", "pay_1") == expected


def test_verify_accepts_exact_signature():
    sig = payment_signature(SECRET, "order_1", "pay_1")
    assert verify_payment_signature(SECRET, "order_1", "pay_1", sig)


def test_verify_is_order_sensitive():
    sig = payment_signature(SECRET, "order_1", "pay_1")
    assert not verify_payment_signature(SECRET, "pay_1", "order_1", sig)


def test_single_character_mutation_fails():
    sig = payment_signature(SECRET, "order_1", "pay_1")
    assert not verify_payment_signature(SECRET, "order_2", "pay_1", sig)
    assert not verify_payment_signature(SECRET, "order_1", "pay_2", sig)
    assert not verify_payment_signature("s3creT", "order_1", "pay_1", sig)


def test_verify_is_case_sensitive():
    sig = payment_signature(SECRET, "order_1", "pay_1")
    assert not verify_payment_signature(SECRET, "order_1", "pay_1", sig.upper())


def test_verify_rejects_non_ascii_signature():
    assert not verify_payment_signature(SECRET, "order_1", "pay_1", "é" * 64)


def test_receipts_are_short_and_unique():
    receipts = {generate_receipt() for _ in range(200)}
    assert len(receipts) == 200
    assert all(r.startswith("rcpt_") and len(r) <= MAX_RECEIPT_LENGTH for r in receipts)
