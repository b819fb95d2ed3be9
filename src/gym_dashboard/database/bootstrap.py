"""Local setup: create the schema and a demo owner with a few members."""

from __future__ import annotations

import logging
import re
from contextlib import closing
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.constants import PRICE_BY_SUBSCRIPTION, SESSIONS_BY_SUBSCRIPTION
from ..core.enums import MembershipStatus, PaymentStatus, SessionStatus, SubscriptionType
from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

DEMO_USERNAME = "admin"
DEMO_PASSWORD = "admin123"


def _connect(target: DBConfig, *, with_database: bool = True):
    return mysql.connector.connect(**target.connect_kwargs(with_database=with_database))


def strip_create_db_and_use(sql: str) -> str:
    # schema.sql names a database; the configured one wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    return re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ';' outside quoted strings and '--' comments."""
    buf = []
    quote: Optional[str] = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            buf.append(ch)
            if ch == "\\" and i + 1 < len(sql):
                buf.append(sql[i + 1])
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
            buf.append(ch)
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            i = len(sql) if end == -1 else end
            continue
        elif ch == ";":
            stmt = "".join(buf).strip()
            if stmt:
                yield stmt
            buf = []
        else:
            buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    with closing(_connect(target, with_database=False)) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    sql = strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    target = DBConfig.from_mapping(db_config)
    with closing(_connect(target)) as conn:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    logger.info("Schema applied to %s@%s/%s", target.user, target.host, target.database)


def ensure_demo_owner(db_config: dict, *, username: str = DEMO_USERNAME, password: str = DEMO_PASSWORD) -> int:
    """Create (or re-activate and reset the password of) the demo owner; returns its id."""
    target = DBConfig.from_mapping(db_config)
    with closing(_connect(target)) as conn:
        cur = conn.cursor(dictionary=True)
        password_hash = generate_password_hash(password)
        cur.execute("SELECT owner_id FROM owners WHERE username=%s", (username,))
        row = cur.fetchone()
        if row:
            owner_id = int(row["owner_id"])
            cur.execute(
                "UPDATE owners SET password_hash=%s, is_active=1 WHERE owner_id=%s",
                (password_hash, owner_id),
            )
        else:
            cur.execute(
                "INSERT INTO owners (username, full_name, password_hash) VALUES (%s, %s, %s)",
                (username, "Gym Owner", password_hash),
            )
            owner_id = int(cur.lastrowid)
        conn.commit()
    return owner_id


_DEMO_MEMBERS = (
    ("أحمد بن علي", "0550000001", SubscriptionType.SESSIONS_13, 5, PaymentStatus.PAID),
    ("سارة مراد", "0550000002", SubscriptionType.SESSIONS_20, 20, PaymentStatus.PAID),
    ("ياسين حداد", "0550000003", SubscriptionType.SESSIONS_15, 0, PaymentStatus.UNPAID),
)


def seed_demo_members(db_config: dict, owner_id: int, *, today: Optional[date] = None) -> int:
    """Insert demo members once (skipped when the owner already has members)."""
    today = today or date.today()
    target = DBConfig.from_mapping(db_config)
    inserted = 0
    with closing(_connect(target)) as conn:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT COUNT(*) AS c FROM members WHERE owner_id=%s", (owner_id,))
        if int(cur.fetchone()["c"]) > 0:
            return 0

        for name, phone, plan, remaining, payment_status in _DEMO_MEMBERS:
            total = SESSIONS_BY_SUBSCRIPTION.get(plan, 0)
            price = PRICE_BY_SUBSCRIPTION.get(plan, Decimal("1000"))
            status = MembershipStatus.ACTIVE if remaining > 0 else MembershipStatus.PENDING
            cur.execute(
                """
                INSERT INTO members (
                    owner_id, name, membership_status, phone_number, subscription_type,
                    sessions_remaining, subscription_price, payment_status, membership_start_date
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    owner_id, name, status.value, phone, plan.value,
                    remaining, price, payment_status.value, today - timedelta(days=total - remaining),
                ),
            )
            member_id = int(cur.lastrowid)
            if remaining > 0:
                cur.execute(
                    """
                    INSERT INTO sessions (
                        owner_id, member_id, member_name, subscription_type, total_sessions,
                        used_sessions, remaining_sessions, start_date, status, price, payment_status
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        owner_id, member_id, name, plan.value, total,
                        total - remaining, remaining, today, SessionStatus.ACTIVE.value, price,
                        payment_status.value,
                    ),
                )
            inserted += 1
        conn.commit()
    logger.info("Seeded %s demo members for owner %s", inserted, owner_id)
    return inserted


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_mapping(db_config)
    with closing(_connect(target)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
