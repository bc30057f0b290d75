from sqlalchemy import select
from sqlalchemy.orm import Session

from online_assessment.core.config import settings
from online_assessment.core.security import hash_password
from online_assessment.models.rbac import Role, User, UserRole


ROLE_DESCRIPTIONS = {
    'super_admin': 'Full system access and governance.',
    'admin': 'School administrator; manages every test.',
    'teacher': 'Authors, publishes and analyzes online tests.',
    'student': 'Takes online tests assigned to their class.',
}


def ensure_reference_data(db: Session) -> None:
    existing_roles = {role.name for role in db.scalars(select(Role)).all()}
    for role_name, description in ROLE_DESCRIPTIONS.items():
        if role_name not in existing_roles:
            db.add(Role(name=role_name, description=description))
    db.flush()

    admin = db.scalar(select(User).where(User.email == settings.FIRST_ADMIN_EMAIL.lower()))
    if not admin:
        admin = User(
            email=settings.FIRST_ADMIN_EMAIL.lower(),
            full_name='Initial Super Admin',
            hashed_password=hash_password(settings.FIRST_ADMIN_PASSWORD),
            is_active=True,
        )
        db.add(admin)
        db.flush()

    role_rows = db.scalars(select(Role).where(Role.name.in_(['super_admin', 'admin']))).all()
    role_ids = {row.role_id for row in db.scalars(select(UserRole).where(UserRole.user_id == admin.id)).all()}
    for role in role_rows:
        if role.id not in role_ids:
            db.add(UserRole(user_id=admin.id, role_id=role.id))
    db.flush()
