# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal
from storefront.data.models.product import ProductModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_PRODUCTS = [
    {"title": "Margherita", "description": "Tomato, mozzarella, basil", "price": Decimal("450.00"), "image_url": "/img/margherita.jpg"},
    {"title": "Pepperoni", "description": "Tomato, mozzarella, pepperoni", "price": Decimal("520.00"), "image_url": "/img/pepperoni.jpg"},
    {"title": "Four Cheese", "description": "Mozzarella, gorgonzola, parmesan, cheddar", "price": Decimal("590.00"), "image_url": "/img/four-cheese.jpg"},
    {"title": "Lemonade", "description": "0.5 l", "price": Decimal("150.00"), "image_url": "/img/lemonade.jpg"},
]


def seed():
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return
        db.add_all(ProductModel(**p) for p in DEMO_PRODUCTS)
        db.commit()
        logger.info(f"Seeded catalog with {len(DEMO_PRODUCTS)} products")
    finally:
        db.close()
