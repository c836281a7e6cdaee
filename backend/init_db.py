"""
Database initialization script
Run this to create tables and seed a demo account with default templates
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from app.core.database import engine, Base, SessionLocal
from app.core.security import get_password_hash
from app.models import User, Location
from app.services.review_templates import ReviewTemplateService
from app.services.template_renderer import (
    DEFAULT_EMAIL_SUBJECT, DEFAULT_EMAIL_TEMPLATE, DEFAULT_SMS_TEMPLATE,
)


def init_db():
    """Initialize database with tables"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✓ Tables created successfully")


def seed_data():
    """Seed a demo owner, one location and default email/SMS templates"""
    db = SessionLocal()

    try:
        print("\nSeeding initial data...")

        demo = db.query(User).filter(User.username == "demo").first()
        if not demo:
            demo = User(
                email="demo@repuradar.com",
                username="demo",
                full_name="Demo Owner",
                business_name="Demo Coffee Co.",
                hashed_password=get_password_hash("demo12345"),
            )
            db.add(demo)
            db.commit()
            db.refresh(demo)
            print("✓ Demo user created (username: demo, password: demo12345)")

        if not db.query(Location).filter(Location.owner_id == demo.id).first():
            db.add(Location(owner_id=demo.id, name="Demo Coffee Co. - Downtown"))
            db.commit()
            print("✓ Demo location created")

        templates = ReviewTemplateService(db)
        if not templates.get_default(demo.id, "email"):
            templates.create(demo.id, {
                "name": "Default email",
                "template_type": "email",
                "subject": DEFAULT_EMAIL_SUBJECT,
                "content": DEFAULT_EMAIL_TEMPLATE,
                "is_default": True,
            })
            print("✓ Default email template created")
        if not templates.get_default(demo.id, "sms"):
            templates.create(demo.id, {
                "name": "Default SMS",
                "template_type": "sms",
                "content": DEFAULT_SMS_TEMPLATE,
                "is_default": True,
            })
            print("✓ Default SMS template created")

        print("\n✓ Database seeded successfully")
    except Exception as e:
        print(f"\n✗ Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
    seed_data()
