"""
Pytest Configuration and Shared Fixtures for Live Dashboard Backend Tests.

This module provides fixtures and configuration for all backend tests, supporting:
- A default Settings instance independent of the process environment
- A small personnel registry with Vietnamese names, a legacy row without id,
  and names that collide under substring matching
- A store registry split across two partners plus an unowned store
- Typed report records and raw report rows as the report store returns them
- Actor profiles for every visibility class

Helpers:
- make_report: Build a ReportRecord with defaults for unspecified fields
- make_bucket: Build a MetricsBucket for ranking tests
"""

from datetime import date
from typing import Any, Dict, List

import pytest

from live_dashboard.core.config import Settings
from live_dashboard.models import (
    ActorProfile,
    MetricsBucket,
    PersonRecord,
    ReportRecord,
    Shift,
    StoreRecord,
)


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - api: Tests that go through the FastAPI application
    - property: Tests asserting an invariant over several inputs

    Usage:
        # Run only service tests:
        pytest -m "not api"
    """
    config.addinivalue_line(
        'markers',
        'api: marks tests exercising HTTP endpoints through TestClient'
    )
    config.addinivalue_line(
        'markers',
        'property: marks tests asserting an invariant over a set of inputs'
    )


# ============================================================
# HELPERS
# ============================================================

def make_report(**overrides: Any) -> ReportRecord:
    """
    Build a ReportRecord, filling unspecified fields with neutral defaults.

    Usage:
        report = make_report(hostName="Nguyễn Văn A", gmv=100)
    """
    fields: Dict[str, Any] = {
        'date': date(2025, 12, 1),
        'channelId': 'S1',
        'hostName': '',
        'reporter': '',
        'shift': None,
        'gmv': 0.0,
        'adCost': 0.0,
        'orders': 0.0,
        'totalViews': 0.0,
        'viewers': 0.0,
        'productClicks': 0.0,
    }
    fields.update(overrides)
    return ReportRecord(**fields)


def make_bucket(key: str, **overrides: Any) -> MetricsBucket:
    """Build a MetricsBucket labelled with its key."""
    return MetricsBucket(key=key, label=key, **overrides)


# ============================================================
# SETTINGS FIXTURE
# ============================================================

@pytest.fixture
def settings() -> Settings:
    """
    Settings with the documented defaults, ignoring any .env file.

    Tests pass this explicitly so results do not depend on the environment.
    """
    return Settings(_env_file=None)


# ============================================================
# REGISTRY FIXTURES
# ============================================================

@pytest.fixture
def personnel() -> List[PersonRecord]:
    """
    Personnel registry in load order.

    - p-001 and p-002 are regular hosts
    - p-003 is the control-room assistant
    - the legacy row has no id and is keyed by full name
    - "Lan Anh" and "Ngọc Lan" both contain "lan"
    """
    return [
        PersonRecord(
            id='p-001',
            fullName='Nguyễn Văn A',
            email='nguyenvana@example.com',
            department='Live',
            position='Host',
            baseSalary=8_000_000,
            monthlyKPITarget=200_000_000,
        ),
        PersonRecord(
            id='p-002',
            fullName='Trần Thị B',
            email='tranthib@example.com',
            department='Live',
            position='Host',
            baseSalary=10_000_000,
            monthlyKPITarget=100_000_000,
        ),
        PersonRecord(
            id='p-003',
            fullName='Lê Văn Trình',
            email='trinh@example.com',
            department='Live',
            position='TRỢ LIVE',
        ),
        PersonRecord(
            fullName='Lan Anh',
            baseSalary=6_000_000,
            monthlyKPITarget=50_000_000,
        ),
        PersonRecord(
            id='p-005',
            fullName='Ngọc Lan',
            baseSalary=6_000_000,
        ),
    ]


@pytest.fixture
def stores() -> List[StoreRecord]:
    """Store registry: S1 and S3 belong to P1, S2 to P2, S4 to nobody."""
    return [
        StoreRecord(id='S1', name='Cửa hàng Một', partnerId='P1'),
        StoreRecord(id='S2', name='Cửa hàng Hai', partnerId='P2'),
        StoreRecord(id='S3', name='Cửa hàng Ba', partnerId='P1'),
        StoreRecord(id='S4', name='Cửa hàng Bốn'),
    ]


# ============================================================
# REPORT FIXTURES
# ============================================================

@pytest.fixture
def reports() -> List[ReportRecord]:
    """
    Six sessions over three days across stores, shifts and hosts.

    Includes a host spelled without accents, a host missing from the
    registry, a blank host and a report for a store not in the registry.
    """
    return [
        make_report(
            id='r1', date=date(2025, 12, 1), channelId='S1',
            hostName='Nguyễn Văn A', reporter='Trần Thị B', shift=Shift.MORNING,
            gmv=10_000_000, adCost=2_000_000, orders=40, totalViews=1000,
            viewers=800, productClicks=400,
        ),
        make_report(
            id='r2', date=date(2025, 12, 1), channelId='S2',
            hostName='Trần Thị B', reporter='Trần Thị B', shift=Shift.EVENING,
            gmv=20_000_000, adCost=4_000_000, orders=60, totalViews=2000,
            viewers=1500, productClicks=0,
        ),
        make_report(
            id='r3', date=date(2025, 12, 2), channelId='S1',
            hostName='nguyen van a', reporter='Lê Văn Trình', shift=Shift.AFTERNOON,
            gmv=5_000_000, adCost=0, orders=10, totalViews=500,
            viewers=300, productClicks=100,
        ),
        make_report(
            id='r4', date=date(2025, 12, 2), channelId='S3',
            hostName='Khách Mời', reporter='Lê Văn Trình', shift=None,
            gmv=3_000_000, adCost=1_000_000, orders=5, totalViews=200,
            viewers=150, productClicks=50,
        ),
        make_report(
            id='r5', date=date(2025, 12, 3), channelId='S9',
            hostName='', reporter='Trần Thị B', shift=Shift.MORNING,
            gmv=1_000_000, adCost=500_000, orders=2, totalViews=100,
            viewers=80, productClicks=0,
        ),
        make_report(
            id='r6', date=date(2025, 12, 3), channelId='S2',
            hostName='Trần  Thị B ', reporter='Nguyễn Văn A', shift=Shift.EVENING,
            gmv=8_000_000, adCost=2_000_000, orders=20, totalViews=900,
            viewers=700, productClicks=300,
        ),
    ]


@pytest.fixture
def raw_report_rows() -> List[Dict[str, Any]]:
    """Report rows as loosely typed dicts, numbers stored as strings."""
    return [
        {
            'id': 'r1', 'date': '2025-12-01', 'channelId': 'S1',
            'hostName': 'Nguyễn Văn A', 'reporter': 'Trần Thị B', 'shift': 'Sáng',
            'gmv': '10000000', 'adCost': '2000000', 'orders': '40',
            'totalViews': '1000', 'viewers': '800', 'productClicks': '400',
        },
        {
            'id': 'r2', 'date': '2025-12-01T19:30:00', 'channelId': 'S2',
            'hostName': 'Trần Thị B', 'reporter': None, 'shift': 'Ca Tối',
            'gmv': 20000000, 'adCost': 'n/a', 'orders': None,
            'viewers': 1500,
        },
        {
            'id': 'r3', 'date': 'not a date', 'channelId': 'S1',
            'hostName': 'Nguyễn Văn A', 'gmv': '1',
        },
    ]


# ============================================================
# ACTOR FIXTURES
# ============================================================

@pytest.fixture
def admin_actor() -> ActorProfile:
    """Admin that also carries partner and employee flags."""
    return ActorProfile(
        role='admin',
        name='Quản Trị',
        partnerId='P2',
        isPartner=True,
        isRegularEmployee=True,
    )


@pytest.fixture
def partner_actor() -> ActorProfile:
    return ActorProfile(role='user', name='Đối Tác Một', partnerId='P1', isPartner=True)


@pytest.fixture
def restricted_actor() -> ActorProfile:
    return ActorProfile(role='user', name='Nguyễn Văn A', isRegularEmployee=True)


@pytest.fixture
def control_room_actor() -> ActorProfile:
    return ActorProfile(
        role='user',
        name='Lê Văn Trình',
        isRegularEmployee=True,
        isUnrestrictedViewer=True,
    )
