# tests/test_database.py
"""Unit tests for the atomic() unit-of-work helper."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from labtrack.database import atomic
from labtrack.exceptions import NotFoundError, StorageError
from labtrack.models.user import User


def insert_behind_session(db, student_id):
    """Write a row the session's identity map does not know about."""
    db.execute(text(
        "INSERT INTO users (StudentID, First_Name, Last_Name) VALUES (:id, 'Raw', 'Row')"
    ), {"id": student_id})
    db.commit()


class TestAtomic:
    def test_commits_on_success(self, db):
        with atomic(db):
            user = User(student_id=5, first_name="A", last_name="B", logged_in=False)
            user.set_tags(0)
            db.add(user)
        db.expire_all()
        assert db.query(User).filter(User.student_id == 5).count() == 1

    def test_domain_error_rolls_back_and_passes_through(self, db):
        with pytest.raises(NotFoundError):
            with atomic(db):
                db.add(User(student_id=6, first_name="A", last_name="B", logged_in=False))
                db.flush()
                raise NotFoundError("nope")
        assert db.query(User).filter(User.student_id == 6).count() == 0

    def test_constraint_violation_becomes_storage_error(self, db):
        insert_behind_session(db, 7)
        with pytest.raises(StorageError):
            with atomic(db):
                db.add(User(student_id=7, first_name="Dup", last_name="Row", logged_in=False))
        assert db.query(User).filter(User.student_id == 7).one().first_name == "Raw"

    def test_passthrough_keeps_integrity_error(self, db):
        insert_behind_session(db, 8)
        with pytest.raises(IntegrityError):
            with atomic(db, passthrough=(IntegrityError,)):
                db.add(User(student_id=8, first_name="Dup", last_name="Row", logged_in=False))
