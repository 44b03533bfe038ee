from dataclasses import dataclass

from app.schemas.practice import CategoryItem, RoleInfo


@dataclass
class SubmissionContext:
    """
    一次管理端操作所需的调用方状态，由路由显式传入服务层。
    user_id 为 None 表示未登录；role 为已解析过的角色（可能为 None）；
    categories 为页面已加载、按 order_index 排好序的分类列表（None 表示尚未加载）。
    """
    user_id: str | None
    role: RoleInfo | None = None
    categories: list[CategoryItem] | None = None

    @property
    def known_admin(self) -> bool:
        return self.role is not None and self.role.is_admin
