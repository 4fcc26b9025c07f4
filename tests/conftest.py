"""
Shared fixtures for the promotions test suite.

Configuration is read at import time, so the environment is pinned here before
anything from ``laundry_saas`` is imported. Integration tests run against a
throwaway SQLite file whose schema is rebuilt for every test.
"""

import os
import tempfile
from datetime import timedelta

_TEST_DIR = tempfile.mkdtemp(prefix="laundry-saas-tests-")

os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["JWT_ACCESS_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ["PROMOTIONS_TIMEZONE"] = "UTC"

import pytest
import httpx

from laundry_saas.core.db import AsyncSessionLocal, drop_models, init_models
from laundry_saas.core.security import hash_password, issue_access_token
from laundry_saas.constants.roles import Role
from laundry_saas.models.tenancy.tenancy_models import Tenancy
from laundry_saas.models.users.user_models import User
from laundry_saas.models.promotions.discount_models import Discount
from laundry_saas.schemas.promotions.discount_rule_schemas import dump_rules, parse_rules
from laundry_saas.utils.datetime_utils import promotions_now

TEST_PASSWORD = "Sup3rSecret!"
# hashing is slow, every fixture user shares one hash
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# =====================================================
# DATABASE
# =====================================================
@pytest.fixture
async def schema():
    await init_models()
    yield
    await drop_models()


@pytest.fixture
async def db_session(schema):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client(schema):
    from main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# =====================================================
# FACTORIES
# =====================================================
def today():
    return promotions_now().date()


async def make_tenancy(db, slug: str, name: str | None = None, is_active: bool = True) -> Tenancy:
    tenancy = Tenancy(name=name or slug.replace("-", " ").title(), slug=slug, is_active=is_active)
    db.add(tenancy)
    await db.commit()
    await db.refresh(tenancy)
    return tenancy


async def make_user(
    db,
    email: str,
    role: str,
    tenancy: Tenancy | None = None,
    **fields,
) -> User:
    user = User(
        tenancy_id=tenancy.id if tenancy else None,
        username=email,
        password_hash=_PASSWORD_HASH,
        role=role,
        **{"is_active": True, **fields},
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_discount(db, tenancy: Tenancy, rules: list[dict], **fields) -> Discount:
    start = fields.pop("start_date", today() - timedelta(days=1))
    end = fields.pop("end_date", today() + timedelta(days=30))
    discount = Discount(
        tenancy_id=tenancy.id,
        name=fields.pop("name", "Weekday Saver"),
        rules=dump_rules(parse_rules(rules)),
        start_date=start,
        end_date=end,
        **fields,
    )
    db.add(discount)
    await db.commit()
    await db.refresh(discount)
    return discount


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_access_token(user)}"}


# =====================================================
# COMMON ACTORS
# =====================================================
@pytest.fixture
async def tenancy(db_session):
    return await make_tenancy(db_session, "sparkle-laundry", "Sparkle Laundry")


@pytest.fixture
async def other_tenancy(db_session):
    return await make_tenancy(db_session, "fresh-folds", "Fresh Folds")


@pytest.fixture
async def superadmin(db_session):
    return await make_user(db_session, "root@laundrysaas.com", Role.SUPERADMIN.value)


@pytest.fixture
async def admin(db_session, tenancy):
    return await make_user(db_session, "owner@sparklelaundry.com", Role.ADMIN.value, tenancy)


@pytest.fixture
async def customer(db_session, tenancy):
    return await make_user(db_session, "jane@sparklelaundry.com", Role.CUSTOMER.value, tenancy)


@pytest.fixture
async def other_admin(db_session, other_tenancy):
    return await make_user(db_session, "owner@freshfolds.com", Role.ADMIN.value, other_tenancy)
