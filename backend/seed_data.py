"""Seed database with orderer accounts and the default catalog.

Idempotent: re-running skips users and items that already exist.
"""
from shoplist.config import settings
from shoplist.database import SessionLocal, upsert_insert
from shoplist.models import Item, User

SEED_ITEMS = [
    # Beverages
    {"name": "Milk", "category": "Beverages", "is_evergreen": True},
    {"name": "Orange juice", "category": "Beverages", "is_evergreen": False},
    {"name": "Coffee", "category": "Beverages", "is_evergreen": True},
    {"name": "Tea", "category": "Beverages", "is_evergreen": True},
    {"name": "Sparkling water", "category": "Beverages", "is_evergreen": False},
    # Snacks
    {"name": "Fruit", "category": "Snacks", "is_evergreen": True},
    {"name": "Nuts", "category": "Snacks", "is_evergreen": False},
    {"name": "Crackers", "category": "Snacks", "is_evergreen": False},
    {"name": "Dark chocolate", "category": "Snacks", "is_evergreen": False},
    {"name": "Yogurt", "category": "Snacks", "is_evergreen": True},
    # Office supplies
    {"name": "Printer paper", "category": "Office", "is_evergreen": True},
    {"name": "Sticky notes", "category": "Office", "is_evergreen": True},
    {"name": "Pens", "category": "Office", "is_evergreen": True},
    {"name": "Tissues", "category": "Office", "is_evergreen": True},
    {"name": "Hand soap", "category": "Office", "is_evergreen": True},
    {"name": "Paper towels", "category": "Office", "is_evergreen": True},
    {"name": "Dish soap", "category": "Office", "is_evergreen": True},
    # General
    {"name": "Batteries", "category": "General", "is_evergreen": False},
    {"name": "Light bulbs", "category": "General", "is_evergreen": False},
]


def seed():
    """Seed database with orderers and catalog items."""
    db = SessionLocal()

    try:
        created_users = 0
        for email in settings.orderer_emails:
            if not email.endswith(f"@{settings.ALLOWED_EMAIL_DOMAIN}"):
                print(f"Skipping {email}: outside {settings.ALLOWED_EMAIL_DOMAIN}")
                continue
            user = db.query(User).filter(User.email == email).first()
            if user is None:
                db.add(User(email=email, role="orderer"))
                created_users += 1
            elif user.role != "orderer":
                user.role = "orderer"
        db.flush()

        stmt = (
            upsert_insert(db, Item)
            .values(SEED_ITEMS)
            .on_conflict_do_nothing(index_elements=["name", "category"])
            .returning(Item.id)
        )
        inserted = db.execute(stmt).fetchall()
        db.commit()

        print(f"Users: {created_users} created")
        print(f"Items: {len(inserted)} inserted ({len(SEED_ITEMS)} in seed; duplicates skipped)")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
