from sqlalchemy.ext.asyncio import AsyncSession
from laundry_saas.models.support.activity_models import UserActivity
from laundry_saas.constants.activity_templates import ACTIVITY_TEMPLATES
from laundry_saas.constants.activity_codes import ActivityCode

SYSTEM_ACTOR = "system"


def render_activity(code: ActivityCode, **context) -> str:
    try:
        template = ACTIVITY_TEMPLATES[code]
    except KeyError:
        raise ValueError(f"No activity template for code {code}") from None

    try:
        return template.format(**context)
    except KeyError as exc:
        raise ValueError(f"Activity {code} is missing context key {exc.args[0]!r}") from exc


def _record(db: AsyncSession, user_id, username: str, tenancy_id, message: str):
    db.add(
        UserActivity(
            tenancy_id=tenancy_id,
            user_id=user_id,
            username_snapshot=username,
            message=message,
        )
    )


async def emit_user_activity(db: AsyncSession, user, code: ActivityCode, **context):
    """Queue an activity entry for an authenticated actor; committed with the caller's transaction."""
    tenancy_id = context.pop("tenancy_id", user.tenancy_id)
    message = render_activity(
        code,
        actor_role=user.role.capitalize(),
        actor_email=user.username,
        **context,
    )
    _record(db, user.id, user.username, tenancy_id, message)


async def emit_system_activity(db: AsyncSession, code: ActivityCode, **context):
    tenancy_id = context.pop("tenancy_id", None)
    message = render_activity(
        code,
        actor_role="System",
        actor_email=SYSTEM_ACTOR,
        **context,
    )
    _record(db, None, SYSTEM_ACTOR, tenancy_id, message)
