import os
import sys
import random
from decimal import Decimal

import pandas as pd

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

# Database models and setup
from database import SessionLocal, init_db
from models.category import Category
from models.product import Product
from models.users import User
from utils.identity import create_identity, normalize_email

# Configuration
DATA_DIR = os.path.join(os.path.dirname(__file__), "data_source")
PRODUCTS_CSV = os.path.join(DATA_DIR, "demo_products.csv")
DEMO_PASSWORD = "password123"
DEMO_IDENTITIES = [
    ("seller1@example.com", {"full_name": "Demo Seller One", "role": "seller"}),
    ("seller2@example.com", {"full_name": "Demo Seller Two", "role": "seller"}),
    ("buyer@example.com", {"full_name": "Demo Buyer"}),
]
# End Configuration


def ensure_identities(session):
    """Creates demo identities through the signup path so profiles get provisioned."""
    identities = {}
    for email, metadata in DEMO_IDENTITIES:
        user = session.query(User).filter(User.email == normalize_email(email)).first()
        if not user:
            user = create_identity(session, email, DEMO_PASSWORD, metadata)
            print(f"Created {metadata.get('role', 'buyer')} {user.email}")
        identities[user.email] = user
    return identities


def load_products(session, sellers):
    """Loads demo products from CSV and spreads them over the demo sellers."""
    try:
        products_df = pd.read_csv(PRODUCTS_CSV)
    except FileNotFoundError:
        print(f"Error: {PRODUCTS_CSV} not found.")
        return 0

    categories = {c.name: c.id for c in session.query(Category).all()}

    # Clean data: drop rows without name or price, fill optional columns
    products_df.dropna(subset=["name", "price"], inplace=True)
    products_df["description"] = products_df["description"].fillna("")
    products_df["quantity"] = products_df["quantity"].fillna(0).astype(int)

    print(f"Inserting {len(products_df)} products...")
    for _, row in products_df.iterrows():
        session.add(Product(
            seller_id=random.choice(sellers).id,
            name=row["name"],
            description=row["description"] or None,
            price=Decimal(str(row["price"])).quantize(Decimal("0.01")),
            quantity=int(row["quantity"]),
            category_id=categories.get(row.get("category")),
            is_active=True,
        ))
    session.commit()
    return len(products_df)


def populate_database():
    """Main execution function to populate database."""
    init_db()
    session = SessionLocal()
    try:
        identities = ensure_identities(session)
        sellers = [u for u in identities.values() if u.profile.role.value == "seller"]

        # Products of the demo sellers are replaced, other listings are kept
        session.query(Product).filter(Product.seller_id.in_([s.id for s in sellers])).delete(synchronize_session=False)
        session.commit()

        count = load_products(session, sellers)
        print(f"Inserted {count} demo products.")
    finally:
        session.close()


if __name__ == "__main__":
    populate_database()
