'''
Live Dashboard Backend Test Suite

Test Modules:
-------------
- test_name_matching.py: Normalization and matching rules
  - Diacritic, case, whitespace and punctuation handling
  - Reflexivity and symmetry over sample names

- test_personnel_directory.py: Host name reconciliation
  - Name, email and email local part resolution
  - First-in-input-order tie-break with a warning

- test_access_scope.py: Actor classification and visibility
  - Admin, partner, control-room, restricted and default actors
  - Fail-closed cases

- test_ingestion.py: Coercion of raw rows
- test_metrics.py: Aggregation, filters and the weekly host matrix
- test_ranking.py: Composite and GMV leaderboards
- test_personnel_reports.py: Personnel summary and salary/KPI rows
- test_api.py: HTTP endpoints through TestClient

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
