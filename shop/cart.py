"""
عربة التسوق (Cart store).

The cart is a mapping of variant key -> line item. ``Cart`` holds the pure
map logic; ``PersistentCart`` wraps it and writes the whole mapping to a
storage backend after every mutation.
"""
import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional

from django.conf import settings

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "|"


def make_key(product_id, size=None, color=None):
    return KEY_SEPARATOR.join([str(product_id), size or "", color or ""])


@dataclass
class CartLineItem:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int = 1
    image_url: str = ""
    size: Optional[str] = None
    color: Optional[str] = None
    key: str = field(default="", compare=False)

    def __post_init__(self):
        self.product_id = str(self.product_id)
        self.unit_price = Decimal(str(self.unit_price))
        if not self.key:
            self.key = make_key(self.product_id, self.size, self.color)

    @property
    def subtotal(self):
        return self.unit_price * self.quantity

    def to_dict(self):
        return {
            'product_id': self.product_id,
            'name': self.name,
            'unit_price': str(self.unit_price),
            'quantity': self.quantity,
            'image_url': self.image_url,
            'size': self.size,
            'color': self.color,
            'key': self.key,
        }

    @classmethod
    def from_dict(cls, data):
        quantity = int(data['quantity'])
        if quantity < 1:
            raise ValueError(f"Invalid quantity {quantity} for {data.get('key')}")
        unit_price = Decimal(str(data['unit_price']))
        if not unit_price.is_finite() or unit_price < 0:
            raise ValueError(f"Invalid price {unit_price} for {data.get('key')}")
        return cls(
            product_id=data['product_id'],
            name=data.get('name', ''),
            unit_price=unit_price,
            quantity=quantity,
            image_url=data.get('image_url') or '',
            size=data.get('size') or None,
            color=data.get('color') or None,
            key=data.get('key', ''),
        )


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    item_count: int


class Cart:
    def __init__(self, items=None):
        self.items = dict(items or {})

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items.values())

    def __contains__(self, key):
        return key in self.items

    def get(self, key):
        return self.items.get(key)

    def add_item(self, product_id, name, unit_price, quantity=1, image_url="", size=None, color=None):
        key = make_key(product_id, size, color)
        existing = self.items.get(key)
        # الكمية تُجمع دائماً ولا تُستبدل
        next_quantity = (existing.quantity if existing else 0) + max(1, int(quantity))
        item = CartLineItem(
            product_id=product_id,
            name=name,
            unit_price=unit_price,
            quantity=next_quantity,
            image_url=image_url or "",
            size=size or None,
            color=color or None,
            key=key,
        )
        self.items[key] = item
        return item

    def remove_item(self, key):
        self.items.pop(key, None)

    def increment(self, key):
        item = self.items.get(key)
        if item is not None:
            item.quantity += 1

    def decrement(self, key):
        item = self.items.get(key)
        if item is not None:
            item.quantity = max(1, item.quantity - 1)

    def set_quantity(self, key, quantity):
        item = self.items.get(key)
        if item is not None:
            item.quantity = max(1, math.floor(quantity))

    def clear(self):
        self.items = {}

    def totals(self):
        subtotal = sum((item.subtotal for item in self.items.values()), Decimal("0"))
        item_count = sum(item.quantity for item in self.items.values())
        return CartTotals(subtotal=subtotal, item_count=item_count)

    def to_dict(self):
        return {'items': {key: item.to_dict() for key, item in self.items.items()}}

    @classmethod
    def from_dict(cls, data):
        items = {}
        for raw in data['items'].values():
            item = CartLineItem.from_dict(raw)
            items[item.key] = item
        return cls(items)


# --- التخزين (Storage) ---

class SessionCartStorage:
    """Keeps the serialized cart in the Django session under one fixed key."""

    def __init__(self, session, key=None):
        self.session = session
        self.key = key or settings.CART_STORAGE_KEY

    def load(self):
        return self.session.get(self.key)

    def save(self, data):
        self.session[self.key] = data
        self.session.modified = True


def load_cart(storage):
    data = storage.load()
    if data is None:
        return Cart()
    try:
        return Cart.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as e:
        logger.warning("Discarding unreadable cart payload under %r: %s", storage.key, e)
        return Cart()


class PersistentCart:
    """Wraps a ``Cart`` and saves it to ``storage`` after each mutation."""

    def __init__(self, cart, storage):
        self.cart = cart
        self.storage = storage

    @classmethod
    def from_storage(cls, storage):
        return cls(load_cart(storage), storage)

    def _commit(self, result=None):
        self.storage.save(self.cart.to_dict())
        return result

    def add_item(self, *args, **kwargs):
        return self._commit(self.cart.add_item(*args, **kwargs))

    def remove_item(self, key):
        return self._commit(self.cart.remove_item(key))

    def increment(self, key):
        return self._commit(self.cart.increment(key))

    def decrement(self, key):
        return self._commit(self.cart.decrement(key))

    def set_quantity(self, key, quantity):
        return self._commit(self.cart.set_quantity(key, quantity))

    def clear(self):
        return self._commit(self.cart.clear())

    # القراءة فقط، بدون حفظ
    def totals(self):
        return self.cart.totals()

    def get(self, key):
        return self.cart.get(key)

    def to_dict(self):
        return self.cart.to_dict()

    @property
    def items(self):
        return self.cart.items

    def __len__(self):
        return len(self.cart)

    def __iter__(self):
        return iter(self.cart)

    def __contains__(self, key):
        return key in self.cart


def get_cart(request):
    return PersistentCart.from_storage(SessionCartStorage(request.session))
