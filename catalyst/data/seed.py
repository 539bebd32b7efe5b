# catalyst/data/seed.py
"""Catalog the store starts with when nothing has been saved yet."""
from typing import Dict, List

from catalyst.domain.schemas import Coupon, Order, Product, Review

PAYMENT_LINK = "https://pages.razorpay.com/pl_RIfTCxnYj73xqE/view"


def initial_products() -> List[Product]:
    return [
        Product(
            id=1,
            image_seed="ebook-marketing",
            title="The Ultimate Marketing Guide",
            description="A comprehensive e-book covering everything from SEO to social media marketing.",
            features=["In-depth SEO strategies", "Social Media content calendar", "Email marketing templates"],
            price="₹499",
            sale_price="₹299",
            category="E-books",
            manual_rating=5,
            sku="EBOOK-MARK-001",
            tags=["seo", "marketing", "social media"],
            file_format="PDF",
            payment_link=PAYMENT_LINK,
            course_content=[
                {
                    "id": "mod-marketing-1",
                    "title": "Module 1: Introduction to Digital Marketing",
                    "files": [
                        {
                            "id": "file-pdf-1",
                            "name": "The Ultimate Marketing Guide.pdf",
                            "type": "pdf",
                            "url": "https://www.w3.org/WAI/ER/tests/xhtml/testfiles/resources/pdf/dummy.pdf",
                        }
                    ],
                    "modules": [],
                }
            ],
        ),
        Product(
            id=2,
            image_seed="dropshipping-course",
            title="Dropshipping Masterclass",
            description="Video course and PDF notes on how to start and scale a successful dropshipping business.",
            features=["Over 10 hours of video content", "Supplier vetting checklist", "Facebook Ads blueprint"],
            price="₹1999",
            category="Online Courses",
            sku="COURSE-DROP-001",
            tags=["dropshipping", "ecommerce", "video course"],
            file_format="MP4, PDF",
            payment_link=PAYMENT_LINK,
            coupon_code="WELCOME500",
            course_content=[
                {
                    "id": "mod-dropship-1",
                    "title": "Module 1: Finding Your Niche",
                    "files": [
                        {
                            "id": "file-video-yt-1",
                            "name": "Welcome to the Course!",
                            "type": "youtube",
                            "url": "https://www.youtube.com/watch?v=l6bTbg3aVIM",
                        }
                    ],
                    "modules": [],
                }
            ],
        ),
        Product(
            id=3,
            image_seed="seo-notes",
            title="SEO Checklist PDF",
            description="A printable PDF checklist to optimize your website for search engines.",
            price="₹3",
            is_free=True,
            category="Digital Goods",
            sku="DIGI-SEO-CHK-001",
            tags=["seo", "checklist"],
            file_format="PDF",
            payment_link=PAYMENT_LINK,
        ),
        Product(
            id=4,
            image_seed="advanced-seo-ebook",
            title="Advanced SEO Techniques",
            description="An e-book for experienced marketers looking to level up their SEO game.",
            price="₹799",
            sale_price="₹599",
            category="E-books",
            manual_rating=4.8,
            sku="EBOOK-SEO-ADV-002",
            tags=["seo", "marketing", "technical seo"],
            file_format="E-book",
            payment_link=PAYMENT_LINK,
            course_content=[
                {
                    "id": "mod-adv-seo-1",
                    "title": "Chapter 1: The Evolution of SEO",
                    "files": [
                        {
                            "id": "file-ebook-1",
                            "name": "The Ever-Changing Landscape",
                            "type": "ebook",
                            "url": "",
                            "content": "<h2>The Ever-Changing Landscape</h2><p>Search Engine Optimization is not a static field.</p>",
                        }
                    ],
                    "modules": [],
                }
            ],
        ),
    ]


def initial_reviews() -> Dict[int, List[Review]]:
    return {
        1: [
            Review(name="Rohan Sharma", rating=5, comment="This guide was a game-changer for my business.", date="2 weeks ago"),
            Review(name="Priya Patel", rating=4, comment="Very informative and well-structured.", date="1 month ago"),
        ],
        2: [
            Review(name="Amit Singh", rating=5, comment="Absolutely the best dropshipping course out there.", date="3 days ago"),
        ],
        4: [
            Review(name="Sneha Verma", rating=5, comment="Finally, an SEO book that goes beyond the basics.", date="1 week ago"),
            Review(name="Rajesh Kumar", rating=4, comment="Some parts are very technical.", date="2 weeks ago"),
        ],
    }


def initial_coupons() -> List[Coupon]:
    return [
        Coupon(id=1, code="SUMMER25", type="percentage", value=25, expiry_date="2025-12-31", usage_limit=100, times_used=42),
        Coupon(id=2, code="WELCOME500", type="fixed", value=500, expiry_date="2024-12-31", usage_limit=500, times_used=150),
        Coupon(id=3, code="MONSOON10", type="percentage", value=10, expiry_date="2025-12-31", usage_limit=200, times_used=198),
        Coupon(id=4, code="FLAT150", type="fixed", value=150, expiry_date="2025-01-01", usage_limit=1000, times_used=0),
    ]


def initial_orders() -> List[Order]:
    return [
        Order(
            id="DC-1024",
            customer_name="Rohan Sharma",
            customer_email="rohan.s@example.com",
            date="2024-07-21",
            total="₹1999",
            status="Pending",
            items=[{"id": 2, "name": "Dropshipping Masterclass", "quantity": 1, "price": "₹1999"}],
            billing_address="123 Tech Park, Bangalore, KA 560001",
        ),
        Order(
            id="DC-1023",
            customer_name="Priya Patel",
            customer_email="priya.p@example.com",
            date="2024-07-20",
            total="₹299",
            status="Pending",
            items=[{"id": 1, "name": "The Ultimate Marketing Guide", "quantity": 1, "price": "₹299"}],
            billing_address="456 Commerce Rd, Mumbai, MH 400050",
        ),
    ]


def seed(sync) -> List[str]:
    """Write the initial collections for keys that have never been saved. Returns the keys written."""
    from catalyst.services.persistence import STATE_KEYS

    state = sync.load_state()
    written = []
    for field, (key, _) in STATE_KEYS.items():
        if not sync.exists(key) and sync.save(key, getattr(state, field)) is None:
            written.append(key)
    return written
