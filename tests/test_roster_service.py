# tests/test_roster_service.py
"""Unit tests for roster reconciliation."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import patch
from sqlalchemy import text
from labtrack.exceptions import StorageError
from labtrack.services.directory_service import get_user
from labtrack.services.roster_service import RosterRow, import_roster
from labtrack.utils.tags import ADMIN, BLUE, GREEN, WHITE


def row(student_id, first="New", last="Student", white=False, blue=False, green=False, orange=False):
    return RosterRow(
        student_id=student_id,
        first_name=first,
        last_name=last,
        white_tag=white,
        blue_tag=blue,
        green_tag=green,
        orange_tag=orange,
    )


class TestImportRoster:
    def test_add_then_update_then_skip(self, db, make_user):
        make_user(111, tags=WHITE)
        roster = [row("222", white=True), row("111", white=True, blue=True)]

        first = import_roster(db, roster)
        assert first.as_dict() == {"added": 1, "updated": 1, "skipped": 0}

        again = import_roster(db, roster)
        assert again.as_dict() == {"added": 0, "updated": 0, "skipped": 2}

    def test_tags_and_mirrors_rewritten_together(self, db, make_user):
        make_user(111, tags=WHITE)
        import_roster(db, [row("111", green=True)])

        user = get_user(db, 111)
        assert user.tags == GREEN
        assert (user.white_tag, user.green_tag) == (False, True)

    def test_role_bits_survive_import(self, db, make_user):
        make_user(111, tags=ADMIN)
        import_roster(db, [row("111", blue=True)])
        assert get_user(db, 111).tags == ADMIN | BLUE

    def test_new_user_inserted_logged_out(self, db):
        import_roster(db, [row("333", first="Cara", last="Lee", white=True)])
        user = get_user(db, 333)
        assert user.full_name == "Cara Lee"
        assert user.logged_in is False
        assert user.tags == WHITE

    def test_incomplete_rows_skipped_not_fatal(self, db):
        result = import_roster(db, [
            row(None),
            row("444", first=""),
            row("445", last=None),
            row("abc"),
            row("446"),
        ])
        assert result.as_dict() == {"added": 1, "updated": 0, "skipped": 4}

    def test_small_batches_give_same_totals(self, db, make_user):
        make_user(1)
        roster = [row(str(i), white=True) for i in range(1, 8)]
        result = import_roster(db, roster, batch_size=2)
        assert result.as_dict() == {"added": 6, "updated": 1, "skipped": 0}

    def test_repeated_id_in_one_file(self, db):
        result = import_roster(db, [row("500", white=True), row("500", white=True)])
        assert result.as_dict() == {"added": 1, "updated": 0, "skipped": 1}

    def test_out_of_range_id_skipped_and_rest_committed(self, db):
        result = import_roster(db, [row("99999999999999999999", "A", "B"), row("777", "C", "D")])
        assert result.as_dict() == {"added": 1, "updated": 0, "skipped": 1}
        assert get_user(db, 777).full_name == "C D"

    def test_concurrent_insert_of_same_id_is_storage_error(self, db):
        # Another import committed StudentID 500 after this chunk's prefetch
        db.execute(text("INSERT INTO users (StudentID, First_Name, Last_Name) VALUES (500, 'Other', 'Import')"))
        db.commit()

        with patch("labtrack.services.roster_service._existing_users", return_value={}):
            with pytest.raises(StorageError):
                import_roster(db, [row("500", white=True)])

        assert get_user(db, 500).first_name == "Other"
