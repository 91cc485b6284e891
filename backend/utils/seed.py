# utils/seed.py
# Default rows inserted at initialization (privileged, bypasses policies)
from sqlalchemy.orm import Session

from models.category import Category
from models.storage import Bucket
from utils.policies import PRODUCT_IMAGES_BUCKET

DEFAULT_CATEGORIES = [
    ("Electronics", "Electronic devices and gadgets"),
    ("Clothing", "Fashion and apparel"),
    ("Books", "Books and literature"),
    ("Home & Garden", "Home improvement and garden supplies"),
    ("Sports", "Sports equipment and accessories"),
]

PRODUCT_IMAGES_SIZE_LIMIT = 5242880  # 5MB
PRODUCT_IMAGES_MIME_TYPES = ["image/jpeg", "image/png", "image/webp"]


def seed_defaults(db: Session) -> None:
    if db.get(Bucket, PRODUCT_IMAGES_BUCKET) is None:
        db.add(Bucket(
            id=PRODUCT_IMAGES_BUCKET,
            name=PRODUCT_IMAGES_BUCKET,
            public=True,
            file_size_limit=PRODUCT_IMAGES_SIZE_LIMIT,
            allowed_mime_types=PRODUCT_IMAGES_MIME_TYPES,
        ))

    if db.query(Category).count() == 0:
        for name, description in DEFAULT_CATEGORIES:
            db.add(Category(name=name, description=description))

    db.commit()
