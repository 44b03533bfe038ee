"""设置用户角色（提升/撤销管理员）。
使用方式（在项目根目录）：
  python scripts/set_user_role.py alice admin
  python scripts/set_user_role.py alice student
"""
import argparse
import asyncio
import os
import sys

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)
os.chdir(_project_root)

# 加载 .env
_env_file = os.path.join(_project_root, ".env")
if os.path.isfile(_env_file):
    with open(_env_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and "=" in line and not line.startswith("#"):
                k, _, v = line.partition("=")
                k, v = k.strip(), v.strip()
                if k and os.environ.get(k) is None:
                    os.environ[k] = v

from app.core.db import SessionLocal, engine
from app.models.user_role import ROLES
from app.repositories.role_repository import set_role
from app.repositories.user_repository import get_user_by_username


async def run(username: str, role: str) -> bool:
    async with SessionLocal() as db:
        user = await get_user_by_username(db, username)
        if not user:
            print(f"ERROR: User '{username}' not found!")
            print("Please register the user first, then run this script.")
            return False
        row = await set_role(db, user.id, role)
        print(f"SUCCESS: User '{user.username}' (ID: {user.id}) role = {row.role}")
    await engine.dispose()
    return True


def main():
    parser = argparse.ArgumentParser(description="Set a user's practice zone role")
    parser.add_argument("username")
    parser.add_argument("role", choices=ROLES)
    args = parser.parse_args()
    if not asyncio.run(run(args.username, args.role)):
        sys.exit(1)


if __name__ == "__main__":
    main()
