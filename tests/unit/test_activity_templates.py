import pytest

from laundry_saas.constants.activity_codes import ActivityCode
from laundry_saas.constants.activity_templates import ACTIVITY_TEMPLATES
from laundry_saas.utils.activity_helpers import render_activity


def test_every_code_has_a_template():
    assert set(ActivityCode) <= set(ACTIVITY_TEMPLATES)


def test_render_fills_actor_and_target():
    message = render_activity(
        ActivityCode.CREATE_DISCOUNT,
        actor_role="Admin",
        actor_email="owner@sparklelaundry.com",
        target_name="Weekday Saver",
    )

    assert message == "Admin (owner@sparklelaundry.com) created discount Weekday Saver"


def test_missing_context_key_is_reported():
    with pytest.raises(ValueError, match="target_name"):
        render_activity(ActivityCode.DELETE_DISCOUNT, actor_role="Admin", actor_email="a@b.com")
