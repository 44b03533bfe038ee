"""执行 001_create_practice_zone_tables.sql 并写入默认分类。
Postgres 执行 SQL 文件（含 updated_at 触发器）；其他数据库（如本地 SQLite）用 ORM 元数据建表。
与应用使用同一 DATABASE_URL（会从项目根目录 .env 加载环境变量）。

使用方式（在项目根目录）：
  python scripts/run_migration_001_practice_zone.py
  python scripts/run_migration_001_practice_zone.py --skip-seed   # 只建表，不写默认分类
"""
import argparse
import asyncio
import os
import sys

# 项目根目录
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)
os.chdir(_project_root)

# 在导入 app 前加载 .env，保证与 uvicorn 启动时使用同一 DATABASE_URL
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

from pathlib import Path

from sqlalchemy import inspect

from app.core.db import SessionLocal, engine
from app.core.storage import ensure_storage_dirs
from app.models import Base
from app.services.category_service import ensure_default_categories

REQUIRED_TABLES = {"users", "user_roles", "practice_categories", "practice_questions", "practice_notes"}


def split_statements(sql: str) -> list[str]:
    """按空行切分语句，跳过纯注释块。"""
    statements = []
    for block in sql.split("\n\n"):
        lines = [ln for ln in block.strip().splitlines() if not ln.strip().startswith("--")]
        stmt = "\n".join(lines).strip().rstrip(";").strip()
        if stmt:
            statements.append(stmt)
    return statements


async def _table_names() -> set[str]:
    async with engine.connect() as conn:
        return set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))


async def migrate(seed: bool) -> None:
    print(f"Using DB: {engine.url.render_as_string(hide_password=True)}")
    print(f"迁移前已有表: {sorted(await _table_names())}")

    if engine.dialect.name == "postgresql":
        sql_file = Path(_project_root) / "sql" / "migrations" / "001_create_practice_zone_tables.sql"
        if not sql_file.is_file():
            print(f"Migration file not found: {sql_file}")
            sys.exit(1)
        async with engine.begin() as conn:
            for stmt in split_statements(sql_file.read_text(encoding="utf-8")):
                await conn.exec_driver_sql(stmt)
                print(f"OK: {stmt.splitlines()[0][:70]}")
    else:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        print("OK: create_all")

    missing = REQUIRED_TABLES - await _table_names()
    if missing:
        print(f"ERROR: 迁移后仍缺少表: {missing}")
        sys.exit(1)

    if seed:
        async with SessionLocal() as db:
            await ensure_default_categories(db)
        print("默认分类已写入（已存在的跳过）。")

    ensure_storage_dirs()
    await engine.dispose()
    print("Migration 001_create_practice_zone_tables completed.")


def main():
    parser = argparse.ArgumentParser(description="Create practice zone tables and seed default categories")
    parser.add_argument("--skip-seed", action="store_true", help="只建表，不写默认分类")
    args = parser.parse_args()
    asyncio.run(migrate(seed=not args.skip_seed))


if __name__ == "__main__":
    main()
