"""
الدفع التجريبي (Mock payment processing).

No real provider is wired in: each method sleeps for
``settings.PAYMENT_MOCK_DELAY`` seconds and returns a fake payment record.
"""
import logging
import time

from django.conf import settings

logger = logging.getLogger(__name__)

APPLE_PAY = 'apple_pay'
CREDIT_CARD = 'credit_card'
BANK_TRANSFER = 'bank_transfer'

PAYMENT_PREFIXES = {
    APPLE_PAY: 'ap',
    CREDIT_CARD: 'cc',
    BANK_TRANSFER: 'bt',
}


class PaymentError(Exception):
    pass


def _payment_id(method):
    return f"{PAYMENT_PREFIXES[method]}_{int(time.time() * 1000)}"


def process_payment(method, card=None):
    if method not in PAYMENT_PREFIXES:
        raise PaymentError(f"Unsupported payment method: {method!r}")

    delay = getattr(settings, 'PAYMENT_MOCK_DELAY', 0)
    if delay:
        time.sleep(delay)

    result = {
        'payment_method': method,
        'payment_id': _payment_id(method),
        'status': 'completed',
    }
    if method == CREDIT_CARD:
        # لا نحتفظ برقم البطاقة كاملاً
        number = ((card or {}).get('card_number') or '').replace(' ', '')
        result['card_last4'] = number[-4:]
        result['card_name'] = (card or {}).get('card_name', '')
    elif method == BANK_TRANSFER:
        result['status'] = 'pending'
        result['bank_details'] = dict(settings.BANK_DETAILS)

    logger.info("Mock payment %s processed via %s", result['payment_id'], method)
    return result
