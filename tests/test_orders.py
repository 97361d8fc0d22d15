from decimal import Decimal

import pytest
from django.core import mail

from shop.models import Order, ProductSize
from shop.orders import create_order, orders_for_email, update_order_status

pytestmark = pytest.mark.django_db


def order_payload(product, quantity=2, **overrides):
    payload = {
        'customer': {'name': 'Sara Ali', 'email': 'Sara@Example.com', 'phone': '0500000000'},
        'items': [{
            'id': str(product.id),
            'name': product.name,
            'price': product.price,
            'quantity': quantity,
            'size': 'M',
            'color': 'Black',
            'image': '',
        }],
        'total': Decimal('255.00'),
        'status': 'pending',
        'paymentMethod': 'apple_pay',
        'paymentId': 'ap_123',
        'shippingAddress': {
            'name': 'Sara Ali',
            'street': 'King Fahd Road 12',
            'city': 'Riyadh',
            'postalCode': '12211',
            'country': 'Saudi Arabia',
        },
    }
    payload.update(overrides)
    return payload


class TestCreateOrder:

    def test_creates_order_and_items(self, product):
        # Act
        order_id = create_order(order_payload(product))

        # Assert
        assert isinstance(order_id, str)
        order = Order.objects.get(pk=order_id)
        assert order.customer_name == 'Sara Ali'
        assert order.status == Order.STATUS_PENDING
        assert order.payment_method == 'apple_pay'
        assert order.total == Decimal('255.00')
        assert order.city == 'Riyadh'
        item = order.items.get()
        assert item.product == product
        assert item.quantity == 2
        assert item.subtotal == Decimal('200.00')

    def test_reduces_matching_size_stock(self, product):
        create_order(order_payload(product, quantity=2))

        size_m = ProductSize.objects.get(variant__product=product, size_name='M')
        product.refresh_from_db()
        assert size_m.stock == 3
        assert product.stock == 5

    def test_stock_never_goes_negative(self, product):
        create_order(order_payload(product, quantity=50))

        size_m = ProductSize.objects.get(variant__product=product, size_name='M')
        assert size_m.stock == 0

    def test_unknown_product_reference_is_kept(self, product):
        payload = order_payload(product)
        payload['items'][0]['id'] = 'legacy-sku-9'

        order = Order.objects.get(pk=create_order(payload))

        item = order.items.get()
        assert item.product is None
        assert item.product_ref == 'legacy-sku-9'

    def test_sends_confirmation_email(self, product):
        order_id = create_order(order_payload(product))

        assert len(mail.outbox) == 1
        assert f"#{order_id}" in mail.outbox[0].subject
        assert 'Sara@Example.com' in mail.outbox[0].to

    def test_links_authenticated_user(self, product, customer):
        order = Order.objects.get(pk=create_order(order_payload(product), user=customer))

        assert order.user == customer

    def test_bad_payload_raises(self, product):
        payload = order_payload(product)
        del payload['customer']

        with pytest.raises(KeyError):
            create_order(payload)
        assert Order.objects.count() == 0


class TestOrderStatus:

    def test_status_change_notifies_customer(self, product):
        order_id = create_order(order_payload(product))
        mail.outbox.clear()

        order = update_order_status(order_id, Order.STATUS_SHIPPED)

        assert order.status == Order.STATUS_SHIPPED
        assert len(mail.outbox) == 1
        assert 'on its way' in mail.outbox[0].body

    def test_delivered_marks_order_complete(self, product):
        order_id = create_order(order_payload(product))

        order = update_order_status(order_id, Order.STATUS_DELIVERED)

        assert order.is_completed

    def test_unknown_status_is_rejected(self, product):
        order_id = create_order(order_payload(product))

        with pytest.raises(ValueError):
            update_order_status(order_id, 'lost')

    def test_saving_without_change_sends_nothing(self, product):
        order = Order.objects.get(pk=create_order(order_payload(product)))
        mail.outbox.clear()

        order.notes = 'Ring the bell'
        order.save()

        assert mail.outbox == []


def test_orders_for_email_is_case_insensitive(product):
    create_order(order_payload(product))
    create_order(order_payload(product, customer={'name': 'Other', 'email': 'other@example.com', 'phone': '1'}))

    orders = list(orders_for_email('sara@example.com'))

    assert len(orders) == 1
    assert orders[0].customer_name == 'Sara Ali'
