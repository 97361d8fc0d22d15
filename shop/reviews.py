import logging

from django.db import transaction
from django.db.models import Avg, Count

from .models import Product, Review

logger = logging.getLogger(__name__)

RATINGS = [5, 4, 3, 2, 1]


def review_stats(product):
    reviews = Review.objects.filter(product=product)
    counts = dict(reviews.order_by().values_list('rating').annotate(n=Count('id')))
    total = sum(counts.values())
    if total == 0:
        return {
            'average_rating': 0,
            'total_reviews': 0,
            'distribution': [{'rating': r, 'count': 0, 'percentage': 0} for r in RATINGS],
        }
    average = reviews.aggregate(avg=Avg('rating'))['avg'] or 0
    return {
        'average_rating': average,
        'total_reviews': total,
        'distribution': [
            {'rating': r, 'count': counts.get(r, 0), 'percentage': counts.get(r, 0) / total * 100}
            for r in RATINGS
        ],
    }


def refresh_product_rating(product):
    stats = review_stats(product)
    Product.objects.filter(pk=product.pk).update(
        rating=stats['average_rating'],
        review_count=stats['total_reviews'],
    )
    product.rating = stats['average_rating']
    product.review_count = stats['total_reviews']


@transaction.atomic
def create_review(product, user, data):
    """يُنشأ التقييم غير موثّق، ويُعاد حساب متوسط المنتج"""
    review = Review.objects.create(
        product=product,
        user=user,
        user_name=user.get_full_name() or user.get_username(),
        user_email=user.email,
        rating=data['rating'],
        title=data['title'],
        comment=data['comment'],
        size=data.get('size') or '',
        color=data.get('color') or '',
        verified=False,
    )
    refresh_product_rating(product)
    return review


def mark_helpful(review, increment=True):
    review.helpful = review.helpful + 1 if increment else max(0, review.helpful - 1)
    review.save(update_fields=['helpful', 'updated_at'])
    return review


@transaction.atomic
def delete_review(review):
    product = review.product
    review.delete()
    refresh_product_rating(product)
    logger.info("Review removed from product %s", product.pk)
