from decimal import Decimal, InvalidOperation

from django import template
from django.utils.translation import get_language

from ..checkout import STEPS

register = template.Library()

CURRENCY_AR = "ر.س"
CURRENCY_EN = "SAR"


def _plain_number(amount):
    # بدون خانات عشرية إذا كان المبلغ صحيحاً
    if amount == amount.to_integral_value():
        return f"{int(amount)}"
    return f"{amount.normalize():f}"


def format_price(value, language=None):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return value
    language = language or get_language() or "ar"
    if language.startswith("ar"):
        return f"{_plain_number(amount)} {CURRENCY_AR}"
    text = f"{amount.quantize(Decimal('0.01')):,.2f}".rstrip("0").rstrip(".")
    return f"{CURRENCY_EN} {text}"


@register.filter(name="price")
def price_filter(value):
    return format_price(value)


@register.simple_tag
def step_state(current, step):
    """Returns 'active', 'done' or 'todo' for the checkout progress bar."""
    if current == step:
        return "active"
    if STEPS.index(step) < STEPS.index(current):
        return "done"
    return "todo"
