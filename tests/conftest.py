from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.contrib.sessions.backends.db import SessionStore

from shop.models import Category, Product, ProductSize, ProductVariant


@pytest.fixture(autouse=True)
def instant_payments(settings):
    settings.PAYMENT_MOCK_DELAY = 0


@pytest.fixture
def session():
    return SessionStore()


@pytest.fixture
def abaya_category(db):
    # تُنشأ الفئات الافتراضية في الترحيل 0002
    return Category.objects.get(slug='abaya')


@pytest.fixture
def hijab_category(db):
    return Category.objects.get(slug='hijab')


def make_product(name, price, category=None, colors=None, **extra):
    product = Product.objects.create(
        name=name,
        description=extra.pop('description', f"{name} description"),
        price=Decimal(str(price)),
        category=category,
        **extra,
    )
    for color_name, sizes in (colors or {}).items():
        variant = ProductVariant.objects.create(product=product, color_name=color_name, color_code='#000000')
        for size_name, stock in sizes.items():
            ProductSize.objects.create(variant=variant, size_name=size_name, stock=stock)
    product.refresh_from_db()
    return product


@pytest.fixture
def product(abaya_category):
    return make_product(
        'Classic Abaya', '100.00', abaya_category,
        colors={'Black': {'M': 5, 'L': 2}},
        name_ar='عباية كلاسيك',
        material='crepe',
        tags='black, everyday',
    )


@pytest.fixture
def customer(db):
    return User.objects.create_user(
        username='sara', email='sara@example.com', password='s3cret-pass',
        first_name='Sara', last_name='Ali',
    )


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(username='admin', email='admin@example.com', password='s3cret-pass', is_staff=True)


@pytest.fixture
def shipping_data():
    return {
        'first_name': 'Sara',
        'last_name': 'Ali',
        'email': 'sara@example.com',
        'phone': '0500000000',
        'address': 'King Fahd Road 12',
        'city': 'Riyadh',
        'postal_code': '12211',
        'country': 'Saudi Arabia',
        'notes': '',
        'save_info': False,
    }
