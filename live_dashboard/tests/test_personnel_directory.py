"""
Test Module for the Personnel Directory.

This module validates:
- Identity key lookup, including legacy records keyed by full name
- Host name resolution through full name, email and email local part
- First-in-input-order tie-break for ambiguous host names, with a warning
- Unattributed host names resolving to None
- Construction guards
"""

import logging

import pytest

from live_dashboard.models import PersonRecord
from live_dashboard.services.personnel_directory import PersonnelDirectory, resolve_person


@pytest.fixture
def directory(personnel) -> PersonnelDirectory:
    return PersonnelDirectory(personnel, min_length=3)


class TestConstruction:

    def test_len_and_iteration_preserve_order(self, directory, personnel):
        assert len(directory) == len(personnel)
        assert list(directory) == personnel

    def test_rejects_non_list(self, personnel):
        with pytest.raises(TypeError):
            PersonnelDirectory(iter(personnel))

    def test_duplicate_identity_key_keeps_first(self, caplog):
        first = PersonRecord(id='p-1', fullName='Nguyễn Văn A')
        second = PersonRecord(id='p-1', fullName='Trần Thị B')
        with caplog.at_level(logging.WARNING):
            directory = PersonnelDirectory([first, second])
        assert directory.find_by_id('p-1') is first
        assert 'Duplicate personnel identity key' in caplog.text


class TestFindById:

    def test_finds_by_id(self, directory):
        assert directory.find_by_id('p-002').fullName == 'Trần Thị B'

    def test_legacy_record_is_keyed_by_full_name(self, directory):
        assert directory.find_by_id('Lan Anh').id is None

    @pytest.mark.parametrize('person_id', [None, '', 'p-999'])
    def test_missing_id_returns_none(self, directory, person_id):
        assert directory.find_by_id(person_id) is None


class TestFindByHostName:

    def test_exact_name(self, directory):
        assert directory.find_by_host_name('Nguyễn Văn A').id == 'p-001'

    def test_unaccented_and_spaced_name(self, directory):
        assert directory.find_by_host_name('  nguyen  van a ').id == 'p-001'

    def test_email(self, directory):
        assert directory.find_by_host_name('tranthib@example.com').id == 'p-002'

    def test_email_local_part(self, directory):
        assert directory.find_by_host_name('tranthib').id == 'p-002'

    def test_substring_of_full_name(self, directory):
        assert directory.find_by_host_name('Trình').id == 'p-003'

    def test_unmatched_host_is_unattributed(self, directory):
        assert directory.find_by_host_name('Khách Mời') is None

    @pytest.mark.parametrize('host_name', [None, '', '   '])
    def test_blank_host_is_unattributed(self, directory, host_name):
        assert directory.find_by_host_name(host_name) is None

    def test_resolve_person_delegates(self, directory):
        assert resolve_person('Trần Thị B', directory).id == 'p-002'


class TestAmbiguity:
    """Substring matches against several people resolve to the first record."""

    def test_first_record_in_input_order_wins(self, directory):
        # "Lan" is contained in both "Lan Anh" and "Ngọc Lan"
        assert directory.find_by_host_name('Lan').fullName == 'Lan Anh'

    def test_order_decides_the_winner(self, personnel):
        reordered = PersonnelDirectory(list(reversed(personnel)), min_length=3)
        assert reordered.find_by_host_name('Lan').fullName == 'Ngọc Lan'

    def test_ambiguity_is_logged(self, directory, caplog):
        with caplog.at_level(logging.WARNING):
            directory.find_by_host_name('Lan')
        assert 'Ambiguous host name' in caplog.text
        assert 'p-005' in caplog.text

    def test_find_all_returns_every_candidate(self, directory):
        names = [person.fullName for person in directory.find_all_by_host_name('Lan')]
        assert names == ['Lan Anh', 'Ngọc Lan']

    def test_earlier_fuzzy_match_beats_later_exact_name(self):
        people = [
            PersonRecord(id='a', fullName='Ngọc Lan'),
            PersonRecord(id='b', fullName='Lan'),
        ]
        directory = PersonnelDirectory(people, min_length=3)
        # The earlier record also contains "lan", so input order still wins
        assert directory.find_by_host_name('Lan').id == 'a'

    def test_exact_match_is_not_ambiguous(self, directory, caplog):
        with caplog.at_level(logging.WARNING):
            directory.find_by_host_name('Nguyễn Văn A')
        assert 'Ambiguous' not in caplog.text
