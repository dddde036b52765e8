"""调用方身份（由身份认证层提供）"""
from dataclasses import dataclass

from flask_login import current_user

from app.errors import RoleNotPermitted, AdminRequired


@dataclass(frozen=True)
class Principal:
    """已认证的调用方：稳定ID + 角色"""
    principal_id: int
    role: str

    @property
    def is_admin(self):
        return self.role == 'admin'

    @property
    def is_teacher(self):
        return self.role == 'teacher'

    @property
    def is_student(self):
        return self.role == 'student'

    def require_role(self, *roles):
        """角色不符时抛出异常"""
        if self.role not in roles:
            if roles == ('admin',):
                raise AdminRequired()
            raise RoleNotPermitted(f'当前角色（{self.role}）不能执行此操作')
        return self


def principal_from_user(user):
    """从登录用户构造Principal"""
    return Principal(principal_id=user.id, role=user.role)


def current_principal():
    """当前登录用户对应的Principal"""
    return principal_from_user(current_user)
