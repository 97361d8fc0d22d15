from decimal import Decimal


def cart_count(request):
    cart = getattr(request, 'cart', None)
    if cart is None:
        return {'cart_count': 0, 'cart_subtotal': Decimal("0")}
    totals = cart.totals()
    return {'cart_count': totals.item_count, 'cart_subtotal': totals.subtotal}
