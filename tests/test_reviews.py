import pytest

from shop.models import Review
from shop.reviews import create_review, delete_review, mark_helpful, review_stats

pytestmark = pytest.mark.django_db


def review_data(rating, **extra):
    return dict({'rating': rating, 'title': f"{rating} stars", 'comment': 'Lovely fabric'}, **extra)


class TestReviewStats:

    def test_no_reviews(self, product):
        stats = review_stats(product)

        assert stats['average_rating'] == 0
        assert stats['total_reviews'] == 0
        assert [row['rating'] for row in stats['distribution']] == [5, 4, 3, 2, 1]
        assert all(row['count'] == 0 for row in stats['distribution'])

    def test_distribution_and_average(self, product, customer):
        for rating in (5, 5, 4, 1):
            create_review(product, customer, review_data(rating))

        stats = review_stats(product)

        assert stats['total_reviews'] == 4
        assert stats['average_rating'] == pytest.approx(3.75)
        by_rating = {row['rating']: row for row in stats['distribution']}
        assert by_rating[5]['count'] == 2
        assert by_rating[5]['percentage'] == pytest.approx(50.0)
        assert sum(row['count'] for row in stats['distribution']) == 4


class TestCreateReview:

    def test_review_is_unverified_and_updates_product(self, product, customer):
        review = create_review(product, customer, review_data(4, size='M', color='Black'))

        product.refresh_from_db()
        assert not review.verified
        assert review.user_name == 'Sara Ali'
        assert review.size == 'M'
        assert product.rating == pytest.approx(4.0)
        assert product.review_count == 1

    def test_delete_refreshes_rating(self, product, customer):
        keep = create_review(product, customer, review_data(2))
        drop = create_review(product, customer, review_data(5))

        delete_review(drop)

        product.refresh_from_db()
        assert list(Review.objects.all()) == [keep]
        assert product.rating == pytest.approx(2.0)
        assert product.review_count == 1


class TestHelpful:

    def test_increment_and_floor(self, product, customer):
        review = create_review(product, customer, review_data(5))

        mark_helpful(review)
        mark_helpful(review)
        assert review.helpful == 2

        for _ in range(4):
            mark_helpful(review, increment=False)
        review.refresh_from_db()
        assert review.helpful == 0
