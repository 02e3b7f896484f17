"""
Personnel Directory Service

In-memory index of canonical personnel records, built once per data load
and read-only afterwards. It answers two questions for the dashboards:

- find_by_id: which record has this identity key
- find_by_host_name: which record a free-text host name from a report
  refers to

Host name resolution walks personnel in input order and returns the first
record whose full name, email, or email local part matches according to
names_match. An index of exact normalized names and emails bounds the
scan: once it reaches the indexed record, nothing later can win.

Ambiguity:
Substring containment can make a short host name match several people
(e.g. "Lan" against "Lan Anh" and "Ngọc Lan"). The first record in input
order wins. Every ambiguous resolution is logged at WARNING with the
candidates so data owners can fix the registry; find_all_by_host_name
returns every candidate for callers that want to surface it.

Thread safety:
The directory holds only tuples and dicts populated in __init__. Reads can
be shared between threads once construction has returned.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from live_dashboard.core.config import get_settings
from live_dashboard.models.schemas import PersonRecord
from live_dashboard.services.name_matching import (
    NormalizedName,
    email_local_part,
    match_normalized,
    normalize_pair,
)


logger = logging.getLogger(__name__)


class PersonnelDirectory:
    """
    Immutable lookup structure over a list of PersonRecord.

    Args:
        personnel: Records in the order they were loaded. Order is the
            tie-break for ambiguous host names.
        min_length: Substring matching threshold; defaults to
            settings.name_match_min_length.

    Raises:
        TypeError: If personnel is not a list or tuple.
    """

    def __init__(
        self,
        personnel: Iterable[PersonRecord],
        min_length: Optional[int] = None,
    ) -> None:
        if not isinstance(personnel, (list, tuple)):
            raise TypeError(
                f"personnel must be a list of PersonRecord, got {type(personnel).__name__}"
            )

        self._min_length = (
            get_settings().name_match_min_length if min_length is None else min_length
        )
        self._records: Tuple[PersonRecord, ...] = tuple(personnel)

        # Normalized forms per record, in input order: (full name, email, email local part)
        self._forms: Tuple[Tuple[NormalizedName, NormalizedName, NormalizedName], ...] = tuple(
            (
                normalize_pair(person.fullName),
                normalize_pair(person.email),
                normalize_pair(email_local_part(person.email)),
            )
            for person in self._records
        )

        self._by_key: Dict[str, PersonRecord] = {}
        self._by_name: Dict[str, int] = {}
        self._by_email: Dict[str, int] = {}

        for position, person in enumerate(self._records):
            key = person.identity_key
            if key and key not in self._by_key:
                self._by_key[key] = person
            elif key:
                logger.warning(f"Duplicate personnel identity key {key!r}; keeping the first record")

            name_form, email_form, _ = self._forms[position]
            if name_form.accented:
                self._by_name.setdefault(name_form.accented, position)
            if email_form.accented:
                self._by_email.setdefault(email_form.accented, position)

        logger.debug(f"Built personnel directory with {len(self._records)} records")

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    @property
    def records(self) -> Tuple[PersonRecord, ...]:
        return self._records

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_by_id(self, person_id: Optional[str]) -> Optional[PersonRecord]:
        """
        Look up a person by identity key.

        Records without an id are keyed by fullName, so a full name also
        resolves them here.
        """
        if not person_id:
            return None
        return self._by_key.get(person_id)

    def _matches_at(self, position: int, host: NormalizedName) -> bool:
        name_form, email_form, local_form = self._forms[position]
        return (
            match_normalized(host, name_form, self._min_length)
            or match_normalized(host, email_form, self._min_length)
            or match_normalized(host, local_form, self._min_length)
        )

    def find_all_by_host_name(self, host_name: Optional[str]) -> List[PersonRecord]:
        """
        Return every record matching a host name, in input order.

        Args:
            host_name: Free-text host name from a report.

        Returns:
            Matching records; empty when nothing matches or the name is blank.
        """
        host = normalize_pair(host_name)
        if not host.accented:
            return []
        return [
            self._records[position]
            for position in range(len(self._records))
            if self._matches_at(position, host)
        ]

    def find_by_host_name(self, host_name: Optional[str]) -> Optional[PersonRecord]:
        """
        Resolve a free-text host name to a personnel record.

        Args:
            host_name: Free-text host name from a report.

        Returns:
            The first matching record in input order, or None when the host
            is unattributed (e.g. contractor staff with no record yet).
        """
        host = normalize_pair(host_name)
        if not host.accented:
            return None

        exact = self._by_name.get(host.accented)
        if exact is None:
            exact = self._by_email.get(host.accented)

        for position in range(len(self._records)):
            if exact is not None and position == exact:
                # Nothing earlier matched, otherwise the loop would have returned
                return self._records[position]
            if self._matches_at(position, host):
                self._warn_if_ambiguous(host_name, position, host)
                return self._records[position]

        logger.debug(f"Host name {host_name!r} matched no personnel record")
        return None

    def _warn_if_ambiguous(
        self,
        host_name: Optional[str],
        winner: int,
        host: NormalizedName,
    ) -> None:
        winner_key = self._records[winner].identity_key
        others = [
            self._records[position].identity_key
            for position in range(winner + 1, len(self._records))
            if self._records[position].identity_key != winner_key
            and self._matches_at(position, host)
        ]
        if others:
            logger.warning(
                f"Ambiguous host name {host_name!r} matches {winner_key} and "
                f"{', '.join(others)}; attributing to the first ({winner_key})"
            )


def resolve_person(
    host_name: Optional[str],
    directory: PersonnelDirectory,
) -> Optional[PersonRecord]:
    """
    Resolve a report host name against a personnel directory.

    Args:
        host_name: Free-text host name.
        directory: Directory built for the current data load.

    Returns:
        The attributed PersonRecord, or None if unattributed.
    """
    return directory.find_by_host_name(host_name)
