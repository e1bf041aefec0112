import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.auth import hash_password, verify_password
from wenlock.enums import AuditAction, ResourceType, Role
from wenlock.exceptions import AuthenticationError, ConflictError, NotFoundError
from wenlock.models.user import User
from wenlock.schemas.user import RegisterRequest, UserUpdate
from wenlock.services.audit_service import RequestMeta
from wenlock.services.base import AuditedService

logger = logging.getLogger(__name__)


class UserService(AuditedService):
    """Credential store and staff management."""

    async def register(self, db: AsyncSession, data: RegisterRequest, actor: Optional[User], meta: RequestMeta = None) -> User:
        username = data.username.strip()
        email = data.email.lower()
        await self._ensure_unique(db, username=username, email=email)

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(data.password),
            role=data.role or Role.GENERAL_STAFF,
        )
        db.add(user)
        await self._commit(db)
        await db.refresh(user)

        await self._audit(
            actor, AuditAction.USER_REGISTER,
            f"New user registered: {user.username} ({user.email}) with role {user.role.value}",
            resource_id=user.id, resource_type=ResourceType.USER, meta=meta,
        )
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str, meta: RequestMeta = None) -> User:
        email = email.lower()
        user = await db.scalar(select(User).where(User.email == email))
        if not user:
            await self._audit(
                None, AuditAction.USER_LOGIN, f"Failed login attempt for email: {email}",
                meta=meta, actor_name=email,
            )
            raise AuthenticationError("Invalid credentials")

        if not verify_password(password, user.password_hash):
            await self._audit(
                user, AuditAction.USER_LOGIN,
                f"Failed login attempt for user: {user.username} (incorrect password)",
                resource_id=user.id, resource_type=ResourceType.USER, meta=meta,
            )
            raise AuthenticationError("Invalid credentials")

        await self._audit(
            user, AuditAction.USER_LOGIN, f"User logged in: {user.username} ({user.email})",
            resource_id=user.id, resource_type=ResourceType.USER, meta=meta,
        )
        return user

    async def list_users(self, db: AsyncSession) -> list[User]:
        result = await db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, user_id: int) -> User:
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update(self, db: AsyncSession, user_id: int, data: UserUpdate, actor: User, meta: RequestMeta = None) -> User:
        user = await self.get(db, user_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "username" in changes:
            changes["username"] = changes["username"].strip()
        if "email" in changes:
            changes["email"] = changes["email"].lower()
        await self._ensure_unique(db, username=changes.get("username"), email=changes.get("email"), exclude_id=user.id)

        changed_fields = sorted(k for k in changes if k != "password")
        if "password" in changes:
            user.password_hash = hash_password(changes.pop("password"))
            changed_fields.append("password")
        old_role = user.role
        for key, value in changes.items():
            setattr(user, key, value)
        await self._commit(db)
        await db.refresh(user)

        details = f"Updated user {user.username}: {', '.join(changed_fields) or 'no changes'}."
        if user.role != old_role:
            details += f" Role changed from '{old_role.value}' to '{user.role.value}'."
        await self._audit(
            actor, AuditAction.USER_UPDATE, details,
            resource_id=user.id, resource_type=ResourceType.USER, meta=meta,
        )
        return user

    async def delete(self, db: AsyncSession, user_id: int, actor: User, meta: RequestMeta = None) -> None:
        user = await self.get(db, user_id)
        summary = f"{user.username} ({user.email}, role {user.role.value})"
        await db.delete(user)
        await db.commit()

        await self._audit(
            actor, AuditAction.USER_DELETE, f"Deleted user {summary}",
            resource_id=user_id, resource_type=ResourceType.USER, meta=meta,
        )

    async def ensure_seed_admin(self, db: AsyncSession, username: str, email: str, password: str) -> Optional[User]:
        """Create the bootstrap admin once. Returns None when nothing was created."""
        if not password:
            return None
        email = email.lower()
        existing = await db.scalar(select(User).where(or_(User.email == email, User.username == username)))
        if existing:
            return None
        user = User(username=username, email=email, password_hash=hash_password(password), role=Role.ADMIN)
        db.add(user)
        await db.commit()
        logger.info("Created bootstrap admin %s", username)
        return user

    @staticmethod
    async def _ensure_unique(
        db: AsyncSession, username: Optional[str] = None, email: Optional[str] = None, exclude_id: Optional[int] = None
    ) -> None:
        if username:
            query = select(User.id).where(User.username == username)
            if exclude_id is not None:
                query = query.where(User.id != exclude_id)
            if await db.scalar(query):
                raise ConflictError("Username already taken")
        if email:
            query = select(User.id).where(User.email == email)
            if exclude_id is not None:
                query = query.where(User.id != exclude_id)
            if await db.scalar(query):
                raise ConflictError("User already exists")

    @staticmethod
    async def _commit(db: AsyncSession) -> None:
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("User already exists")
