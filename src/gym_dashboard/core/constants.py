"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

from .enums import SubscriptionType

SESSIONS_BY_SUBSCRIPTION = {
    SubscriptionType.SESSIONS_13: 13,
    SubscriptionType.SESSIONS_15: 15,
    SubscriptionType.SESSIONS_20: 20,
    SubscriptionType.SESSIONS_30: 30,
}

PRICE_BY_SUBSCRIPTION = {
    SubscriptionType.MONTHLY: Decimal("1500"),
    SubscriptionType.SESSIONS_13: Decimal("1000"),
    SubscriptionType.SESSIONS_15: Decimal("1800"),
    SubscriptionType.SESSIONS_30: Decimal("1800"),
    SubscriptionType.SINGLE_SESSION: Decimal("200"),
}
DEFAULT_SUBSCRIPTION_PRICE = Decimal("1000")

WALK_IN_CUSTOMER_NAME = "زبون غير مشترك"
SINGLE_SESSION_PRICE = PRICE_BY_SUBSCRIPTION[SubscriptionType.SINGLE_SESSION]

# Label used in breakdowns for payments without a subscription type
UNSPECIFIED_SUBSCRIPTION_LABEL = "غير محدد"
WALK_IN_SESSIONS_LABEL = "حصص منفردة"

DEFAULT_ACTIVITY_LIMIT = 10
RECENT_ITEMS_LIMIT = 5
LOGIN_TTL_HOURS = 24
STATS_REFRESH_SECONDS = 30
ACTIVITY_REFRESH_SECONDS = 60
