# repositories/user_repository.py
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select

from models.user import User
from repositories.base import EntityRepository
from constants.roles import UserRole


class UserRepository(EntityRepository[User]):
    """
    用户仓储（数据访问）层。
    说明：
    - 不做业务规则判断（最后一个管理员保护、密码策略），仅做纯粹的持久化读写。
    - 写操作不自动 commit，由上层显式提交。
    """

    model = User
    key_column = "user_id"

    def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == (email or "").strip().lower())
        return self.session.execute(stmt).scalar_one_or_none()

    def exists_email_except_user(self, email: str, user_id: str) -> bool:
        stmt = select(func.count()).select_from(User).where(
            func.lower(User.email) == email.lower(),
            User.user_id != user_id,
        )
        return (self.session.execute(stmt).scalar() or 0) > 0

    def list_all(self, role: Optional[str] = None, is_active: Optional[bool] = None) -> List[User]:
        conditions = []
        if role:
            conditions.append(User.role == role)
        if is_active is not None:
            conditions.append(User.is_active.is_(is_active))
        stmt = select(User)
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = stmt.order_by(User.created_at.desc(), User.id.desc())
        return self.scalars(stmt)

    def count_active_admins_except(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(User).where(
            User.role == UserRole.ADMIN.value,
            User.is_active.is_(True),
            User.user_id != user_id,
        )
        return self.session.execute(stmt).scalar() or 0

    def count(self) -> int:
        return self.session.execute(select(func.count()).select_from(User)).scalar() or 0
