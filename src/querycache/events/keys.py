"""Cache keys, durations and tags for the event portal's queries."""

from datetime import timedelta

CACHE_PREFIXES = {
    "event": "evt",
    "user": "usr",
    "order": "ord",
    "category": "cat",
    "analytics": "ana",
    "admin": "adm",
}


def build_key(prefix: str, *parts: str) -> str:
    """Build a short-prefixed key such as ``evt:42:details``.

    Raises:
        KeyError: If prefix is not one of CACHE_PREFIXES.
    """
    return ":".join([CACHE_PREFIXES[prefix], *parts])


class CacheDurations:
    """How long each kind of query result stays fresh."""

    # Mostly static event data
    EVENT_DETAILS = timedelta(minutes=5)
    EVENT_LIST = timedelta(minutes=5)
    CATEGORIES = timedelta(minutes=30)

    # Registration data changes with every sign-up and check-in
    REGISTRATION_COUNTS = timedelta(seconds=30)
    ATTENDEE_LIST = timedelta(minutes=1)
    EVENT_STATS = timedelta(seconds=30)

    # User-specific data
    USER_REGISTRATIONS = timedelta(seconds=10)
    USER_ORDERS = timedelta(seconds=30)

    ANALYTICS = timedelta(minutes=5)
    REPORTS = timedelta(minutes=10)


class CacheKeys:
    """Key generators for cached portal queries."""

    @staticmethod
    def event_details(event_id: str) -> str:
        return f"event:{event_id}:details"

    @staticmethod
    def event_list(
        country: str,
        category: str | None = None,
        page: int | None = None,
    ) -> str:
        return f"events:list:{country}:{category or 'all'}:{page or 1}"

    @staticmethod
    def event_counts(event_id: str) -> str:
        return f"event:{event_id}:counts"

    @staticmethod
    def event_attendees(event_id: str) -> str:
        return f"event:{event_id}:attendees"

    @staticmethod
    def event_stats(event_id: str) -> str:
        return f"event:{event_id}:stats"

    @staticmethod
    def user_registrations(user_id: str) -> str:
        return f"user:{user_id}:registrations"

    @staticmethod
    def user_orders(user_id: str) -> str:
        return f"user:{user_id}:orders"

    @staticmethod
    def user_orders_by_phone(phone_number: str) -> str:
        return f"phone:{phone_number}:orders"

    @staticmethod
    def categories(include_hidden: bool = False) -> str:
        return f"categories:{str(include_hidden).lower()}"

    @staticmethod
    def analytics(kind: str, period: str) -> str:
        return f"analytics:{kind}:{period}"

    @staticmethod
    def order_details(order_id: str) -> str:
        return f"order:{order_id}:details"

    @staticmethod
    def admin_event_list(country: str) -> str:
        return f"admin:events:{country}"


class CacheTags:
    """Tags shared by cached portal queries."""

    EVENTS = "events"
    EVENT_LIST = "event-list"
    REGISTRATIONS = "registrations"
    COUNTS = "counts"
    ATTENDEES = "attendees"
    USER_DATA = "user-data"
    ORDERS = "orders"
    CATEGORIES = "categories"
    ANALYTICS = "analytics"

    @staticmethod
    def event(event_id: str) -> str:
        return f"event:{event_id}"

    @staticmethod
    def country(country: str) -> str:
        return f"country:{country}"

    @staticmethod
    def user(user_id: str) -> str:
        return f"user:{user_id}"

    @staticmethod
    def phone(phone_number: str) -> str:
        return f"phone:{phone_number}"

    @staticmethod
    def order(order_id: str) -> str:
        return f"order:{order_id}"

    @staticmethod
    def analytics_kind(kind: str) -> str:
        return f"analytics:{kind}"
