"""
Enumeration definitions for the Live Dashboard backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization compatibility
with Pydantic models, enabling automatic serialization/deserialization in API responses.

Enumerations:
- Role: Account role carried by personnel records and actor profiles
- ActorClass: Visibility class an actor is resolved to before scoping
- Shift: Coarse time-of-day bucket of a live-stream session
- GroupDimension: Grouping key accepted by the metrics aggregator
- BucketOrder: Output ordering of aggregated buckets
- RankMode: Leaderboard scoring mode
- PerformanceStatus: Traffic-light status used by the salary/KPI report
"""

from enum import Enum


class Role(str, Enum):
    """
    Account role.

    - ADMIN: Unrestricted access to every store and report
    - USER: Regular account; further narrowed by the actor's flags

    Personnel records may carry other category tags (e.g. a partner or
    employee category); those are kept as plain strings on the record.
    """
    ADMIN = "admin"
    USER = "user"


class ActorClass(str, Enum):
    """
    Visibility class of an authenticated actor.

    Evaluated in declaration order; the first class whose predicate holds wins.

    - ADMIN: Sees all stores and reports
    - PARTNER: Sees only stores bound to the actor's partnerId
    - UNRESTRICTED_EMPLOYEE: Control-room staff ("TRỢ LIVE"); no extra narrowing
    - RESTRICTED_EMPLOYEE: Sees only reports they hosted
    - DEFAULT: No role predicate applied; sees the set as given
    """
    ADMIN = "admin"
    PARTNER = "partner"
    UNRESTRICTED_EMPLOYEE = "unrestricted_employee"
    RESTRICTED_EMPLOYEE = "restricted_employee"
    DEFAULT = "default"


class Shift(str, Enum):
    """
    Live-stream shift.

    Source labels are Vietnamese: Sáng (morning), Chiều (afternoon),
    Tối (evening). Reports without a shift are aggregated under UNSPECIFIED.
    """
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    UNSPECIFIED = "unspecified"

    @property
    def label(self) -> str:
        """Vietnamese display label used by the dashboards."""
        return _SHIFT_LABELS[self]


_SHIFT_LABELS = {
    Shift.MORNING: "Sáng",
    Shift.AFTERNOON: "Chiều",
    Shift.EVENING: "Tối",
    Shift.UNSPECIFIED: "Chưa xác định",
}

# Fixed display order for shift buckets
SHIFT_ORDER = [Shift.MORNING, Shift.AFTERNOON, Shift.EVENING, Shift.UNSPECIFIED]


class GroupDimension(str, Enum):
    """
    Grouping dimension for aggregation.

    - DATE: Calendar day of the session
    - SHIFT: Session shift
    - HOST: Host name as typed in the report
    - STORE: Store (channelId)
    - HOST_STORE: Host within a store, the grain of the hotlive leaderboard
    """
    DATE = "date"
    SHIFT = "shift"
    HOST = "host"
    STORE = "store"
    HOST_STORE = "host_store"


class BucketOrder(str, Enum):
    """
    Ordering applied to aggregated buckets.

    - CHRONOLOGICAL: Ascending by bucket key (ISO dates sort chronologically)
    - SHIFT: Fixed morning, afternoon, evening, unspecified order
    - GMV_DESC: Descending by summed GMV
    - INSERTION: Order in which each key first appeared
    """
    CHRONOLOGICAL = "chronological"
    SHIFT = "shift"
    GMV_DESC = "gmv_desc"
    INSERTION = "insertion"


class RankMode(str, Enum):
    """
    Leaderboard scoring mode.

    - COMPOSITE: 0.4 * roi + 0.3 * conversionRate + 0.3 * (gmv / 1,000,000)
    - GMV: Raw summed GMV (salary/KPI top-N views)
    """
    COMPOSITE = "composite"
    GMV = "gmv"


class PerformanceStatus(str, Enum):
    """
    Traffic-light status for KPI and salary coverage.

    - GREEN: Target exceeded
    - YELLOW: Near target / break-even
    - RED: Below target
    """
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
