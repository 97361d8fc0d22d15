"""
Tests for the checkout step sequencer.

The sequencer is exercised with a plain ``Cart`` and stub ``place_order``
callables, so no database is involved.
"""
from decimal import Decimal

import pytest

from shop.cart import Cart
from shop.checkout import (
    CONFIRMATION, PAYMENT, SHIPPING, CheckoutSession, CheckoutStepError, build_order_payload,
)
from shop.pricing import compute_pricing

APPLE_PAY = {'payment_method': 'apple_pay', 'payment_id': 'ap_1', 'status': 'completed'}


@pytest.fixture
def cart():
    cart = Cart()
    cart.add_item(product_id='P1', name='Abaya', unit_price=100, quantity=1, size='m', color='black')
    cart.add_item(product_id='P2', name='Hijab', unit_price=50, quantity=1)
    return cart


class PlaceOrderStub:
    def __init__(self, result='order-1', error=None):
        self.result = result
        self.error = error
        self.payloads = []

    def __call__(self, payload):
        self.payloads.append(payload)
        if self.error:
            raise self.error
        return self.result


class TestStepSequence:

    def test_starts_at_shipping(self):
        assert CheckoutSession().step == SHIPPING

    def test_shipping_then_payment_then_confirmation(self, cart, shipping_data):
        # Arrange
        checkout = CheckoutSession()

        # Act / Assert
        checkout.submit_shipping(shipping_data)
        assert checkout.step == PAYMENT
        assert checkout.collected_data['city'] == 'Riyadh'

        checkout.complete_payment(APPLE_PAY, cart, place_order=PlaceOrderStub())
        assert checkout.step == CONFIRMATION
        assert checkout.is_complete

    def test_payment_before_shipping_is_rejected(self, cart):
        checkout = CheckoutSession()

        with pytest.raises(CheckoutStepError):
            checkout.complete_payment(APPLE_PAY, cart, place_order=PlaceOrderStub())

        assert checkout.step == SHIPPING

    def test_shipping_cannot_be_submitted_twice(self, shipping_data):
        checkout = CheckoutSession()
        checkout.submit_shipping(shipping_data)

        with pytest.raises(CheckoutStepError):
            checkout.submit_shipping(shipping_data)

        assert checkout.step == PAYMENT

    def test_confirmation_is_terminal(self, cart, shipping_data):
        checkout = CheckoutSession()
        checkout.submit_shipping(shipping_data)
        checkout.complete_payment(APPLE_PAY, cart, place_order=PlaceOrderStub())

        with pytest.raises(CheckoutStepError):
            checkout.submit_shipping(shipping_data)
        with pytest.raises(CheckoutStepError):
            checkout.complete_payment(APPLE_PAY, cart, place_order=PlaceOrderStub())

        assert checkout.step == CONFIRMATION

    def test_unknown_step_is_rejected(self):
        with pytest.raises(ValueError):
            CheckoutSession(step='review')


class TestCompletePayment:

    def test_order_payload_matches_contract(self, cart, shipping_data):
        # Arrange
        place_order = PlaceOrderStub()
        checkout = CheckoutSession()
        checkout.submit_shipping(shipping_data)

        # Act
        checkout.complete_payment(APPLE_PAY, cart, place_order=place_order)

        # Assert
        payload = place_order.payloads[0]
        assert payload['customer'] == {'name': 'Sara Ali', 'email': 'sara@example.com', 'phone': '0500000000'}
        assert payload['status'] == 'pending'
        assert payload['paymentMethod'] == 'apple_pay'
        assert payload['shippingAddress'] == {
            'name': 'Sara Ali',
            'street': 'King Fahd Road 12',
            'city': 'Riyadh',
            'postalCode': '12211',
            'country': 'Saudi Arabia',
        }
        # 150 + 25 shipping + 22.5 VAT
        assert payload['total'] == Decimal('197.5')
        assert [item['id'] for item in payload['items']] == ['P1', 'P2']

    def test_missing_variant_defaults_in_payload(self, cart, shipping_data):
        place_order = PlaceOrderStub()
        checkout = CheckoutSession()
        checkout.submit_shipping(shipping_data)

        checkout.complete_payment(APPLE_PAY, cart, place_order=place_order)

        hijab = place_order.payloads[0]['items'][1]
        assert hijab['size'] == 'M'
        assert hijab['color'] == 'Black'
        assert hijab['image'] == ''

    def test_success_records_order_and_clears_cart(self, cart, shipping_data):
        checkout = CheckoutSession()
        checkout.submit_shipping(shipping_data)

        order_id = checkout.complete_payment(APPLE_PAY, cart, place_order=PlaceOrderStub('42'))

        assert order_id == '42'
        assert checkout.order_id == '42'
        assert not checkout.order_failed
        assert len(cart) == 0
        assert checkout.summary['total'] == '197.50'

    def test_failed_order_still_reaches_confirmation(self, cart, shipping_data, caplog):
        checkout = CheckoutSession()
        checkout.submit_shipping(shipping_data)

        checkout.complete_payment(APPLE_PAY, cart, place_order=PlaceOrderStub(error=RuntimeError('backend down')))

        assert checkout.step == CONFIRMATION
        assert checkout.order_id is None
        assert checkout.order_failed
        assert len(cart) == 0
        assert 'Error creating order' in caplog.text


class TestSerialization:

    def test_round_trip(self, cart, shipping_data):
        checkout = CheckoutSession()
        checkout.submit_shipping(shipping_data)
        checkout.complete_payment(APPLE_PAY, cart, place_order=PlaceOrderStub('7'))

        restored = CheckoutSession.from_dict(checkout.to_dict())

        assert restored.step == CONFIRMATION
        assert restored.collected_data == checkout.collected_data
        assert restored.order_id == '7'
        assert restored.summary == checkout.summary


def test_build_order_payload_uses_full_name(shipping_data):
    data = dict(shipping_data, first_name='Noura', last_name='Saad', payment_method='bank_transfer')
    cart = Cart()
    cart.add_item(product_id='P9', name='Scarf', unit_price=30, quantity=2, color='navy')

    payload = build_order_payload(data, list(cart), compute_pricing(cart.totals().subtotal))

    assert payload['customer']['name'] == 'Noura Saad'
    assert payload['items'][0]['quantity'] == 2
    assert payload['items'][0]['color'] == 'navy'
    assert payload['paymentMethod'] == 'bank_transfer'
