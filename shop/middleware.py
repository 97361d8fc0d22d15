from django.utils.functional import SimpleLazyObject

from .cart import get_cart


class CartMiddleware:
    """Attaches ``request.cart``, loaded from the session on first access."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.cart = SimpleLazyObject(lambda: get_cart(request))
        return self.get_response(request)
