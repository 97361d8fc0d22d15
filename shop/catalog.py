from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from django.db.models import Q

from .models import Product

SORT_OPTIONS = [
    ('newest', 'Newest First'),
    ('oldest', 'Oldest First'),
    ('price-low', 'Price: Low to High'),
    ('price-high', 'Price: High to Low'),
    ('name-asc', 'Name: A to Z'),
    ('name-desc', 'Name: Z to A'),
    ('rating', 'Highest Rated'),
]

_ORDERINGS = {
    'newest': ['-created_at'],
    'oldest': ['created_at'],
    'price-low': ['price'],
    'price-high': ['-price'],
    'name-asc': ['name'],
    'name-desc': ['-name'],
    'rating': ['-rating'],
}


@dataclass
class ProductFilter:
    category: Optional[str] = None
    sizes: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    materials: List[str] = field(default_factory=list)
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    in_stock: bool = False
    is_new: bool = False
    is_featured: bool = False
    search: str = ""


def filter_products(queryset, product_filter):
    f = product_filter
    if f.search:
        queryset = queryset.filter(
            Q(name__icontains=f.search)
            | Q(name_ar__icontains=f.search)
            | Q(description__icontains=f.search)
            | Q(tags__icontains=f.search)
        )
    if f.category:
        queryset = queryset.filter(category__slug=f.category)
    if f.sizes:
        queryset = queryset.filter(variants__sizes__size_name__in=f.sizes)
    if f.colors:
        queryset = queryset.filter(variants__color_name__in=f.colors)
    if f.materials:
        queryset = queryset.filter(material__in=f.materials)
    if f.min_price is not None:
        queryset = queryset.filter(price__gte=f.min_price)
    if f.max_price is not None:
        queryset = queryset.filter(price__lte=f.max_price)
    if f.in_stock:
        queryset = queryset.filter(stock__gt=0)
    if f.is_new:
        queryset = queryset.filter(is_new=True)
    if f.is_featured:
        queryset = queryset.filter(is_featured=True)
    # الفلاتر عبر المتغيرات قد تكرر المنتج
    return queryset.distinct()


def sort_products(queryset, sort):
    ordering = _ORDERINGS.get(sort, _ORDERINGS['newest'])
    return queryset.order_by(*ordering, '-pk')


def featured_products(limit=8):
    return Product.objects.filter(is_featured=True).order_by('-created_at')[:limit]


def new_products(limit=8):
    return Product.objects.filter(is_new=True).order_by('-created_at')[:limit]


def related_products(product, limit=4):
    if product.category_id is None:
        return Product.objects.none()
    return (
        Product.objects.filter(category_id=product.category_id)
        .exclude(pk=product.pk)
        .order_by('-created_at')[:limit]
    )
