import hashlib
import hmac
import time
import uuid

# Razorpay rejects receipts longer than this.
MAX_RECEIPT_LENGTH = 40


def payment_signature(secret: str, order_id: str, payment_id: str) -> str:
    """Hex HMAC-SHA256 Razorpay sends back for a completed checkout."""
    return hmac.new(
        secret.encode("utf-8"),
        f"{order_id}|{payment_id}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_payment_signature(secret: str, order_id: str, payment_id: str, signature: str) -> bool:
    expected = payment_signature(secret, order_id, payment_id)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def generate_receipt() -> str:
    receipt = f"rcpt_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"
    return receipt[:MAX_RECEIPT_LENGTH]
