"""
Access Scoping Service

Decides which stores, reports and personnel an authenticated actor may see.
Every dashboard view runs its data through this module before aggregating,
so it is the single place where data leakage between accounts is prevented.

Actor classification (first matching rule wins):
1. ADMIN: role 'admin'. Sees everything; partner or employee flags are ignored.
2. PARTNER: partner account. Sees stores whose partnerId equals the actor's
   partnerId and the reports of those stores.
3. UNRESTRICTED_EMPLOYEE: regular employee in the control room ("TRỢ LIVE").
   Sees the collections as given; menu and department permissions are
   applied upstream.
4. RESTRICTED_EMPLOYEE: any other regular employee. Sees only reports whose
   hostName matches their own name.
5. DEFAULT: none of the above. Sees the collections as given.

Fail-closed cases:
- A restricted employee without a usable name sees no reports.
- A partner without partnerId sees nothing unless
  settings.partner_without_id_sees_all is enabled, which reproduces the
  legacy dashboards where the partner filter was silently skipped.

The actor is always passed explicitly; nothing here reads session state.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set

from live_dashboard.core.config import Settings, get_settings
from live_dashboard.models import (
    ActorClass,
    ActorProfile,
    PersonRecord,
    ReportRecord,
    Role,
    StoreRecord,
)
from live_dashboard.services.name_matching import (
    match_normalized,
    names_match,
    normalize_name,
    normalize_pair,
    strip_diacritics_name,
)


logger = logging.getLogger(__name__)

PARTNER_DEPARTMENT = 'doi tac'
PARTNER_ROLES = ('partner', 'doi tac')
CONTROL_ROOM_MARKERS = ('tro live', '中控')


# =============================================================================
# Result Container
# =============================================================================


@dataclass
class ScopedData:
    """
    Collections visible to one actor.

    Attributes:
        actor_class: Class the actor was resolved to.
        stores: Visible stores, in input order.
        store_ids: Ids of visible stores.
        reports: Visible reports, in input order.
        personnel: Visible personnel, in input order.
    """
    actor_class: ActorClass
    stores: List[StoreRecord] = field(default_factory=list)
    store_ids: Set[str] = field(default_factory=set)
    reports: List[ReportRecord] = field(default_factory=list)
    personnel: List[PersonRecord] = field(default_factory=list)


# =============================================================================
# Actor Classification
# =============================================================================


def build_actor_profile(
    role: Optional[str],
    name: Optional[str] = None,
    department: Optional[str] = None,
    position: Optional[str] = None,
    partner_id: Optional[str] = None,
) -> ActorProfile:
    """
    Derive an ActorProfile from the attributes a session layer stores.

    - Partner: department "Đối tác" or a partner role tag
    - Regular employee: neither admin nor partner
    - Unrestricted viewer: position mentions "TRỢ LIVE" or "中控"

    Args:
        role: Account role ('admin', 'user', or a category tag).
        name: Display name of the account.
        department: Department of the account.
        position: Position/title of the account.
        partner_id: Partner the account is bound to.

    Returns:
        ActorProfile with flags set.
    """
    role_plain = strip_diacritics_name(role)
    is_admin = role_plain == Role.ADMIN.value
    is_partner = (
        strip_diacritics_name(department) == PARTNER_DEPARTMENT
        or role_plain in PARTNER_ROLES
    )
    position_forms = normalize_pair(position)
    is_control_room = any(
        marker in position_forms.plain or marker in position_forms.accented
        for marker in CONTROL_ROOM_MARKERS
    )

    return ActorProfile(
        role=Role.ADMIN.value if is_admin else (role or Role.USER.value),
        name=name,
        partnerId=partner_id or None,
        isPartner=is_partner,
        isRegularEmployee=not is_admin and not is_partner,
        isUnrestrictedViewer=is_control_room,
    )


def classify_actor(actor: ActorProfile) -> ActorClass:
    """
    Resolve an actor to exactly one visibility class by priority.

    Example:
        >>> classify_actor(ActorProfile(role="admin", isPartner=True))
        <ActorClass.ADMIN: 'admin'>
    """
    if strip_diacritics_name(actor.role) == Role.ADMIN.value:
        return ActorClass.ADMIN
    if actor.isPartner:
        return ActorClass.PARTNER
    if actor.isRegularEmployee:
        if actor.isUnrestrictedViewer:
            return ActorClass.UNRESTRICTED_EMPLOYEE
        return ActorClass.RESTRICTED_EMPLOYEE
    return ActorClass.DEFAULT


def _partner_sees_all(actor: ActorProfile, settings: Settings) -> bool:
    """True when a partner has no partnerId and the legacy fallback is enabled."""
    if actor.partnerId:
        return False
    if settings.partner_without_id_sees_all:
        logger.warning(
            f"Partner actor {actor.name!r} has no partnerId; legacy fallback grants full visibility"
        )
        return True
    logger.warning(f"Partner actor {actor.name!r} has no partnerId; no stores or reports are visible")
    return False


def _require_list(value: object, name: str) -> None:
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"{name} must be a list, got {type(value).__name__}")


# =============================================================================
# Stores
# =============================================================================


def compute_visible_stores(
    actor: ActorProfile,
    all_stores: Sequence[StoreRecord],
    settings: Optional[Settings] = None,
) -> List[StoreRecord]:
    """
    Stores an actor may see, in input order.

    Only partners are narrowed; employees are narrowed on reports instead.

    Raises:
        TypeError: If all_stores is not a list.
    """
    _require_list(all_stores, 'all_stores')
    settings = settings or get_settings()

    if classify_actor(actor) != ActorClass.PARTNER:
        return list(all_stores)

    if not actor.partnerId:
        return list(all_stores) if _partner_sees_all(actor, settings) else []

    return [store for store in all_stores if store.partnerId == actor.partnerId]


def compute_visible_store_ids(
    actor: ActorProfile,
    all_stores: Sequence[StoreRecord],
    settings: Optional[Settings] = None,
) -> Set[str]:
    """Ids of the stores an actor may see."""
    return {store.id for store in compute_visible_stores(actor, all_stores, settings)}


# =============================================================================
# Reports
# =============================================================================


def compute_visible_reports(
    actor: ActorProfile,
    all_reports: Sequence[ReportRecord],
    visible_store_ids: Iterable[str],
    settings: Optional[Settings] = None,
) -> List[ReportRecord]:
    """
    Reports an actor may see, in input order.

    Args:
        actor: The authenticated actor.
        all_reports: Reports already narrowed by upstream permissions.
        visible_store_ids: Result of compute_visible_store_ids for the actor.
        settings: Optional settings override.

    Returns:
        Visible reports. For admins, unrestricted employees and unclassified
        actors this is every input report, in order.

    Raises:
        TypeError: If all_reports is not a list.
    """
    _require_list(all_reports, 'all_reports')
    settings = settings or get_settings()
    actor_class = classify_actor(actor)

    if actor_class == ActorClass.PARTNER:
        if not actor.partnerId:
            return list(all_reports) if _partner_sees_all(actor, settings) else []
        allowed = set(visible_store_ids)
        return [report for report in all_reports if report.channelId in allowed]

    if actor_class == ActorClass.RESTRICTED_EMPLOYEE:
        own_name = normalize_pair(actor.name)
        if not own_name.accented:
            logger.info("Restricted employee without a name; no reports are visible")
            return []
        min_length = settings.name_match_min_length
        return [
            report for report in all_reports
            if match_normalized(normalize_pair(report.hostName), own_name, min_length)
        ]

    return list(all_reports)


def scope_reports_for_actor(
    actor: ActorProfile,
    reports: Sequence[ReportRecord],
    stores: Sequence[StoreRecord],
    settings: Optional[Settings] = None,
) -> List[ReportRecord]:
    """
    Reports an actor may see, given the full store registry.

    Example:
        >>> partner = ActorProfile(isPartner=True, partnerId="P1")
        >>> scoped = scope_reports_for_actor(partner, reports, stores)
    """
    settings = settings or get_settings()
    visible_store_ids = compute_visible_store_ids(actor, stores, settings)
    return compute_visible_reports(actor, reports, visible_store_ids, settings)


# =============================================================================
# Personnel
# =============================================================================


def compute_visible_personnel(
    actor: ActorProfile,
    personnel: Sequence[PersonRecord],
    visible_reports: Sequence[ReportRecord],
    settings: Optional[Settings] = None,
) -> List[PersonRecord]:
    """
    Personnel an actor may see, in input order.

    - Partners see people who hosted one of their visible reports
    - Restricted employees see only records matching their own name
    - Everyone else sees the full list

    Raises:
        TypeError: If personnel is not a list.
    """
    _require_list(personnel, 'personnel')
    settings = settings or get_settings()
    actor_class = classify_actor(actor)
    min_length = settings.name_match_min_length

    if actor_class == ActorClass.PARTNER:
        if not actor.partnerId and _partner_sees_all(actor, settings):
            return list(personnel)
        host_forms = {
            normalize_pair(report.hostName)
            for report in visible_reports
            if normalize_name(report.hostName)
        }
        return [
            person for person in personnel
            if any(
                match_normalized(host, normalize_pair(person.fullName), min_length)
                for host in host_forms
            )
        ]

    if actor_class == ActorClass.RESTRICTED_EMPLOYEE:
        if not normalize_name(actor.name):
            return []
        return [
            person for person in personnel
            if names_match(person.fullName, actor.name, min_length)
        ]

    return list(personnel)


def scope_for_actor(
    actor: ActorProfile,
    reports: Sequence[ReportRecord],
    stores: Sequence[StoreRecord],
    personnel: Sequence[PersonRecord] = (),
    settings: Optional[Settings] = None,
) -> ScopedData:
    """
    Compute every collection an actor may see in one pass.

    Args:
        actor: The authenticated actor.
        reports: All reports for the page load.
        stores: Full store registry.
        personnel: Full personnel registry.
        settings: Optional settings override.

    Returns:
        ScopedData with stores, store ids, reports and personnel.
    """
    settings = settings or get_settings()
    actor_class = classify_actor(actor)

    stores_visible = compute_visible_stores(actor, stores, settings)
    store_ids = {store.id for store in stores_visible}
    reports_visible = compute_visible_reports(actor, reports, store_ids, settings)
    personnel_visible = compute_visible_personnel(
        actor, list(personnel), reports_visible, settings
    )

    logger.debug(
        f"Scoped {actor_class.value} actor {actor.name!r}: "
        f"{len(stores_visible)}/{len(stores)} stores, "
        f"{len(reports_visible)}/{len(reports)} reports, "
        f"{len(personnel_visible)}/{len(personnel)} personnel"
    )

    return ScopedData(
        actor_class=actor_class,
        stores=stores_visible,
        store_ids=store_ids,
        reports=reports_visible,
        personnel=personnel_visible,
    )
