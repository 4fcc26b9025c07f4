from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from laundry_saas.models.tenancy.tenancy_models import Tenancy
from laundry_saas.models.users.user_models import User
from laundry_saas.schemas.tenancy.tenancy_schemas import (
    TenancyCreate,
    TenancyOut,
    TenancyAdminOut,
    TenancyCreatedOut,
    TenancyListData,
)
from laundry_saas.core.security import hash_password
from laundry_saas.core.exceptions import AppException, ConflictError, NotFoundError
from laundry_saas.constants.error_codes import ErrorCode
from laundry_saas.constants.activity_codes import ActivityCode
from laundry_saas.constants.roles import Role
from laundry_saas.utils.activity_helpers import emit_user_activity
from laundry_saas.utils.logger import get_logger

logger = get_logger(__name__)


async def _get_tenancy(db: AsyncSession, tenancy_id: int) -> Tenancy:
    tenancy = await db.get(Tenancy, tenancy_id)
    if not tenancy:
        raise NotFoundError("Tenancy", ErrorCode.TENANCY_NOT_FOUND)
    return tenancy


# =========================
# CREATE TENANCY + FIRST ADMIN
# =========================
async def create_tenancy(db: AsyncSession, payload: TenancyCreate, superadmin: User) -> TenancyCreatedOut:
    slug_taken = await db.scalar(select(Tenancy.id).where(Tenancy.slug == payload.slug))
    if slug_taken:
        raise ConflictError("Tenancy slug already exists", ErrorCode.TENANCY_SLUG_EXISTS)

    email_taken = await db.scalar(select(User.id).where(User.username == payload.admin.email))
    if email_taken:
        raise ConflictError("User already exists", ErrorCode.USER_EMAIL_EXISTS)

    tenancy = Tenancy(
        name=payload.name,
        slug=payload.slug,
        contact_email=payload.contact_email or payload.admin.email,
        created_by_id=superadmin.id,
        updated_by_id=superadmin.id,
    )
    db.add(tenancy)
    await db.flush()

    admin = User(
        tenancy_id=tenancy.id,
        username=payload.admin.email,
        full_name=payload.admin.full_name,
        password_hash=hash_password(payload.admin.password),
        role=Role.ADMIN.value,
        is_active=True,
    )
    db.add(admin)
    await db.flush()

    await emit_user_activity(
        db,
        superadmin,
        ActivityCode.CREATE_TENANCY,
        tenancy_id=tenancy.id,
        target_name=tenancy.name,
        slug=tenancy.slug,
    )

    await db.commit()
    await db.refresh(tenancy)

    logger.info("Tenancy onboarded", extra={"tenancy_id": tenancy.id, "admin_id": admin.id})
    return TenancyCreatedOut(
        tenancy=TenancyOut.model_validate(tenancy),
        admin=TenancyAdminOut(id=admin.id, username=admin.username, role=admin.role),
    )


# =========================
# LIST / GET
# =========================
async def list_tenancies(
    db: AsyncSession,
    search: str | None = None,
    is_active: bool | None = None,
) -> TenancyListData:
    query = select(Tenancy)

    if search:
        query = query.where(
            or_(
                Tenancy.name.icontains(search, autoescape=True),
                Tenancy.slug.icontains(search, autoescape=True),
            )
        )
    if is_active is not None:
        query = query.where(Tenancy.is_active.is_(is_active))

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0
    result = await db.execute(query.order_by(Tenancy.created_at.desc(), Tenancy.id.desc()))

    return TenancyListData(
        total=total,
        items=[TenancyOut.model_validate(t) for t in result.scalars().all()],
    )


async def get_tenancy(db: AsyncSession, tenancy_id: int) -> TenancyOut:
    return TenancyOut.model_validate(await _get_tenancy(db, tenancy_id))


# =========================
# DEACTIVATE
# =========================
async def deactivate_tenancy(db: AsyncSession, tenancy_id: int, superadmin: User) -> TenancyOut:
    tenancy = await _get_tenancy(db, tenancy_id)

    if not tenancy.is_active:
        raise AppException(400, "Tenancy is already inactive", ErrorCode.TENANCY_INACTIVE)

    tenancy.is_active = False
    tenancy.updated_by_id = superadmin.id

    await emit_user_activity(
        db,
        superadmin,
        ActivityCode.DEACTIVATE_TENANCY,
        tenancy_id=tenancy.id,
        target_name=tenancy.name,
    )

    await db.commit()
    await db.refresh(tenancy)

    logger.info("Tenancy deactivated", extra={"tenancy_id": tenancy.id})
    return TenancyOut.model_validate(tenancy)
