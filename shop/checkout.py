"""
خطوات إتمام الطلب (Checkout steps).

A checkout moves forward only: shipping -> payment -> confirmation. There is
no way back; leaving checkout discards the session and a new one starts at
shipping.
"""
import logging

from .pricing import compute_pricing

logger = logging.getLogger(__name__)

SHIPPING = 'shipping'
PAYMENT = 'payment'
CONFIRMATION = 'confirmation'
STEPS = (SHIPPING, PAYMENT, CONFIRMATION)

CHECKOUT_SESSION_KEY = 'checkout'


class CheckoutStepError(Exception):
    def __init__(self, expected, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Checkout is at step {actual!r}, not {expected!r}")


def build_order_payload(data, cart_items, pricing):
    full_name = f"{data['first_name']} {data['last_name']}".strip()
    return {
        'customer': {
            'name': full_name,
            'email': data['email'],
            'phone': data['phone'],
        },
        'items': [
            {
                'id': item.product_id,
                'name': item.name,
                'price': item.unit_price,
                'quantity': item.quantity,
                'size': item.size or 'M',
                'color': item.color or 'Black',
                'image': item.image_url or '',
            }
            for item in cart_items
        ],
        'total': pricing.total,
        'status': 'pending',
        'paymentMethod': data['payment_method'],
        'paymentId': data.get('payment_id', ''),
        'notes': data.get('notes', ''),
        'shippingAddress': {
            'name': full_name,
            'street': data['address'],
            'city': data['city'],
            'postalCode': data['postal_code'],
            'country': data.get('country', ''),
        },
    }


def _summary(cart_items, pricing):
    return {
        'items': [item.to_dict() for item in cart_items],
        'subtotal': str(pricing.subtotal),
        'shipping_fee': str(pricing.shipping_fee),
        'tax': str(pricing.tax),
        'total': str(pricing.total),
    }


class CheckoutSession:
    def __init__(self, step=SHIPPING, collected_data=None, order_id=None, order_failed=False, summary=None):
        if step not in STEPS:
            raise ValueError(f"Unknown checkout step: {step!r}")
        self.step = step
        self.collected_data = dict(collected_data or {})
        self.order_id = order_id
        self.order_failed = order_failed
        self.summary = summary

    @property
    def is_complete(self):
        return self.step == CONFIRMATION

    def _require(self, step):
        if self.step != step:
            raise CheckoutStepError(step, self.step)

    def _advance(self):
        self.step = STEPS[STEPS.index(self.step) + 1]

    def submit_shipping(self, data):
        """Takes the cleaned shipping form data and moves on to payment."""
        self._require(SHIPPING)
        self.collected_data.update(data)
        self._advance()

    def complete_payment(self, payment, cart, place_order):
        """
        Records the payment result, places the order and moves to confirmation.

        ``place_order`` receives the order payload and returns the order id.
        If it raises, the error is logged and checkout still reaches the
        confirmation step with ``order_failed`` set. The cart is cleared
        either way.
        """
        self._require(PAYMENT)
        self.collected_data.update(payment)

        items = list(cart)
        pricing = compute_pricing(cart.totals().subtotal)
        payload = build_order_payload(self.collected_data, items, pricing)
        self.summary = _summary(items, pricing)

        try:
            self.order_id = place_order(payload)
            logger.info("Order created with ID: %s", self.order_id)
        except Exception:
            logger.exception("Error creating order; continuing to confirmation")
            self.order_id = None
            self.order_failed = True

        cart.clear()
        self._advance()
        return self.order_id

    def to_dict(self):
        return {
            'step': self.step,
            'collected_data': self.collected_data,
            'order_id': self.order_id,
            'order_failed': self.order_failed,
            'summary': self.summary,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            step=data.get('step', SHIPPING),
            collected_data=data.get('collected_data'),
            order_id=data.get('order_id'),
            order_failed=data.get('order_failed', False),
            summary=data.get('summary'),
        )


# --- التخزين في الجلسة (Session helpers) ---

def load_checkout(session):
    data = session.get(CHECKOUT_SESSION_KEY)
    if not data:
        return CheckoutSession()
    try:
        return CheckoutSession.from_dict(data)
    except (ValueError, AttributeError) as e:
        logger.warning("Discarding unreadable checkout session: %s", e)
        return CheckoutSession()


def save_checkout(session, checkout):
    session[CHECKOUT_SESSION_KEY] = checkout.to_dict()
    session.modified = True


def discard_checkout(session):
    if CHECKOUT_SESSION_KEY in session:
        del session[CHECKOUT_SESSION_KEY]
        session.modified = True
