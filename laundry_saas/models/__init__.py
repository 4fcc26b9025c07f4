# Tenancy
from laundry_saas.models.tenancy.tenancy_models import Tenancy

# users and auth
from laundry_saas.models.users.user_models import User
from laundry_saas.models.support.activity_models import UserActivity

# Promotions
from laundry_saas.models.promotions.discount_models import Discount
from laundry_saas.models.promotions.campaign_models import Campaign
