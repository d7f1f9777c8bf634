"""
Seed script to create or promote an admin user.

The user id must be the Auth0 subject id (``sub`` claim) of an identity that
already exists in the tenant, so the admin can sign in straight away.

Usage:
    python seed/seed_admin.py <auth0_sub> <email> [name]

Defaults:
    auth0_sub: auth0|seed_admin
    email:     admin@taskdesk.local
"""
import sys
from pathlib import Path

# Add the project root to the path so we can import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskdesk.database import SessionLocal, init_db
from taskdesk.models import User, UserRole, UserStatus
from taskdesk.services.employee_ids import next_employee_id


def seed_admin(subject_id: str, email: str, name: str):
    """Create an admin user in the database, or promote an existing one."""
    init_db()
    db = SessionLocal()

    try:
        existing_user = db.query(User).filter(
            (User.id == subject_id) | (User.email == email)
        ).first()

        if existing_user:
            print(f"⚠️  User '{existing_user.email}' ({existing_user.id}) already exists.")
            print(f"   Current role: {existing_user.role.value}")

            existing_user.role = UserRole.ADMIN
            existing_user.status = UserStatus.ACTIVE
            existing_user.is_deleted = False
            existing_user.deleted_at = None
            if not existing_user.employee_id:
                existing_user.employee_id = next_employee_id(db)
            db.commit()
            print(f"✅ User is now an active ADMIN (employee id {existing_user.employee_id})")
            return

        admin = User(
            id=subject_id,
            email=email,
            name=name,
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
            employee_id=next_employee_id(db),
        )
        db.add(admin)
        db.commit()

        print(f"✅ Created admin user: {name} ({email})")
        print(f"   Auth0 ID: {subject_id}")
        print(f"   Employee ID: {admin.employee_id}")
        print(f"\n⚠️  The Auth0 identity '{subject_id}' must exist for this admin to log in.")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding admin: {str(e)}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    args = sys.argv[1:]
    subject_id = args[0] if len(args) > 0 else "auth0|seed_admin"
    email = args[1] if len(args) > 1 else "admin@taskdesk.local"
    name = args[2] if len(args) > 2 else "TaskDesk Admin"

    print("🌱 Seeding admin user...\n")
    seed_admin(subject_id, email, name)
    print("\n✨ Done!")
