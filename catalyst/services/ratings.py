# catalyst/services/ratings.py
from typing import Dict, List

from catalyst.domain.schemas import Product, ProductWithRating, RatingSummary, Review


def aggregate(reviews: List[Review]) -> RatingSummary:
    if not reviews:
        return RatingSummary(rating=0.0, count=0)
    total = sum(r.rating for r in reviews)
    return RatingSummary(rating=total / len(reviews), count=len(reviews))


def display_rating(product: Product, reviews: List[Review]) -> float:
    # 0 is a valid override, only None means "use the reviews"
    if product.manual_rating is not None:
        return product.manual_rating
    return aggregate(reviews).rating


def with_rating(product: Product, reviews_by_product: Dict[int, List[Review]]) -> ProductWithRating:
    reviews = reviews_by_product.get(product.id, [])
    summary = aggregate(reviews)
    return ProductWithRating(
        **product.model_dump(),
        rating=display_rating(product, reviews),
        review_count=summary.count,
        calculated_rating=summary.rating,
    )
