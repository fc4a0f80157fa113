"""Review read paths."""

from protean.utils.globals import current_domain

from marketplace.product.product import Product
from marketplace.review.review import Review


def _newest_first(reviews):
    return sorted(reviews, key=lambda review: review.created_at, reverse=True)


def reviews_for_product(product_id) -> list[Review]:
    repo = current_domain.repository_for(Review)
    return _newest_first(repo._dao.query.filter(product_id=str(product_id)).all().items)


def reviews_by_buyer(buyer_id) -> list[Review]:
    repo = current_domain.repository_for(Review)
    return _newest_first(repo._dao.query.filter(buyer_id=str(buyer_id)).all().items)


def reviews_for_seller(seller_id) -> list[Review]:
    """Reviews left on any of the seller's products."""
    products = current_domain.repository_for(Product).for_seller(seller_id)
    reviews = []
    for product in products:
        reviews.extend(reviews_for_product(product.id))
    return _newest_first(reviews)
