
import sys
import os

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.infrastructure.database import SessionLocal
from app.domain.models.permission import Permission
from app.domain.models.user import User
from app.application.services.permission_service import seed_permissions
from app.infrastructure.repositories.permission_repository import SQLAlchemyPermissionRepository

PERMISSION = "view_all_items"


def grant(db) -> int:
    """Give every employee lacking it the view_all_items permission."""
    repo = SQLAlchemyPermissionRepository(db, Permission)
    seed_permissions(repo)
    permission = repo.get_by_name(PERMISSION)

    employees = (
        db.query(User)
        .filter(User.role == "employee")
        .filter(~User.permissions.any(Permission.id == permission.id))
        .all()
    )
    for user in employees:
        user.permissions.append(permission)
    db.commit()
    return len(employees)


def main():
    print(f"Granting '{PERMISSION}' to employees...")
    db = SessionLocal()
    try:
        updated = grant(db)
        print(f"Done: {updated} employee(s) updated.")
    except Exception as e:
        print(f"Grant failed: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
