from dataclasses import dataclass
from decimal import Decimal

# سياسة الأسعار الثابتة (Fixed pricing policy)
FREE_SHIPPING_THRESHOLD = Decimal("200")
SHIPPING_FEE = Decimal("25")
VAT_RATE = Decimal("0.15")


@dataclass(frozen=True)
class OrderPricing:
    subtotal: Decimal
    shipping_fee: Decimal
    tax: Decimal
    total: Decimal


def shipping_fee_for(subtotal):
    return Decimal("0") if subtotal > FREE_SHIPPING_THRESHOLD else SHIPPING_FEE


def compute_pricing(subtotal):
    subtotal = Decimal(str(subtotal))
    shipping_fee = shipping_fee_for(subtotal)
    tax = subtotal * VAT_RATE
    return OrderPricing(
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        tax=tax,
        total=subtotal + shipping_fee + tax,
    )
