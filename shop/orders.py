"""
إدارة الطلبات (Orders).

``create_order`` is the persistence boundary of the checkout flow. It takes
the plain order payload built by the checkout sequencer::

    {customer: {name, email, phone},
     items: [{id, name, price, quantity, size, color, image}],
     total, status, paymentMethod,
     shippingAddress: {name, street, city, postalCode, country}}

and returns the new order's id as a string.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from .models import Order, OrderItem, Product, ProductSize

logger = logging.getLogger(__name__)

DEFAULT_ITEM_SIZE = 'M'
DEFAULT_ITEM_COLOR = 'Black'


def _find_product(product_ref):
    if not str(product_ref).isdigit():
        return None
    return Product.objects.filter(pk=int(product_ref)).first()


def _reduce_stock(product, size, color, quantity):
    variant_size = ProductSize.objects.filter(
        variant__product=product,
        variant__color_name__iexact=color,
        size_name__iexact=size,
    ).first()
    if variant_size:
        variant_size.stock = max(0, variant_size.stock - quantity)
        variant_size.save()


@transaction.atomic
def _store_order(order_data, user=None):
    customer = order_data['customer']
    address = order_data['shippingAddress']
    order = Order.objects.create(
        user=user if user is not None and user.is_authenticated else None,
        customer_name=customer['name'],
        email=customer['email'],
        phone=customer['phone'],
        shipping_name=address['name'],
        street=address['street'],
        city=address['city'],
        postal_code=address['postalCode'],
        country=address.get('country') or 'Saudi Arabia',
        notes=order_data.get('notes', ''),
        total=Decimal(str(order_data['total'])).quantize(Decimal('0.01')),
        status=order_data.get('status', Order.STATUS_PENDING),
        payment_method=order_data['paymentMethod'],
        payment_id=order_data.get('paymentId', ''),
    )

    for item in order_data['items']:
        product = _find_product(item['id'])
        size = item.get('size') or DEFAULT_ITEM_SIZE
        color = item.get('color') or DEFAULT_ITEM_COLOR
        OrderItem.objects.create(
            order=order,
            product=product,
            product_ref=str(item['id']),
            name=item['name'],
            price=Decimal(str(item['price'])),
            quantity=int(item['quantity']),
            size=size,
            color=color,
            image=item.get('image') or '',
        )
        if product is not None:
            _reduce_stock(product, size, color, int(item['quantity']))

    return order


def send_order_confirmation(order):
    context = {'order': order, 'items': order.items.all(), 'store_name': settings.STORE_NAME}
    html_message = render_to_string('emails/order_confirmation.html', context)
    subject = f"{settings.STORE_NAME} - Order Confirmation #{order.id}"
    try:
        send_mail(
            subject,
            strip_tags(html_message),
            settings.EMAIL_HOST_USER,
            [order.email, settings.EMAIL_HOST_USER],
            html_message=html_message,
        )
    except Exception:
        logger.exception("Failed to send confirmation email for order %s", order.pk)


def create_order(order_data, user=None):
    try:
        order = _store_order(order_data, user=user)
    except Exception:
        logger.exception("Error creating order")
        raise
    logger.info("Order %s created for %s", order.pk, order.email)
    send_order_confirmation(order)
    return str(order.pk)


def update_order_status(order_id, status):
    valid = {value for value, _ in Order.STATUS_CHOICES}
    if status not in valid:
        raise ValueError(f"Unknown order status: {status!r}")
    order = Order.objects.get(pk=order_id)
    order.status = status
    order.save()
    return order


def orders_for_email(email):
    return Order.objects.filter(email__iexact=email).prefetch_related('items').order_by('-created_at')
