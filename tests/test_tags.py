# tests/test_tags.py
"""Unit tests for the tag bitmask codec."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from labtrack.exceptions import InvalidInputError
from labtrack.utils.tags import (
    ADMIN,
    ALL_TAGS,
    BLUE,
    SUPERVISOR,
    TagSet,
    WHITE,
    compose,
    decompose,
    validate_mask,
)


class TestCodec:
    def test_bit_layout(self):
        assert decompose(1)["white"] is True
        assert decompose(2)["blue"] is True
        assert decompose(4)["green"] is True
        assert decompose(8)["orange"] is True
        assert decompose(16)["admin"] is True
        assert decompose(32)["supervisor"] is True
        assert ALL_TAGS == 63

    def test_compose_inverts_decompose_for_every_defined_mask(self):
        for tags in range(ALL_TAGS + 1):
            assert compose(decompose(tags)) == tags

    def test_zero_is_all_false(self):
        assert not any(decompose(0).values())

    def test_missing_names_count_as_false(self):
        assert compose({"admin": True}) == ADMIN

    def test_unknown_tag_name_rejected(self):
        with pytest.raises(InvalidInputError):
            compose({"purple": True})

    @pytest.mark.parametrize("bad", [-1, "3", 1.5, True, None])
    def test_decompose_rejects_non_masks(self, bad):
        with pytest.raises(InvalidInputError):
            decompose(bad)

    def test_validate_mask_rejects_undefined_bits(self):
        assert validate_mask(ALL_TAGS) == ALL_TAGS
        with pytest.raises(InvalidInputError):
            validate_mask(64)


class TestTagSet:
    def test_from_mask_and_back(self):
        tag_set = TagSet.from_mask(WHITE | SUPERVISOR)
        assert tag_set.white and tag_set.supervisor
        assert not tag_set.admin
        assert tag_set.mask == WHITE | SUPERVISOR

    def test_with_training_keeps_role_bits(self):
        tag_set = TagSet.from_mask(ADMIN | WHITE)
        updated = tag_set.with_training(False, True, False, False)
        assert updated.mask == ADMIN | BLUE
        assert updated.training == (False, True, False, False)

    def test_column_values_names_mirror_attributes(self):
        values = TagSet.from_mask(BLUE).column_values()
        assert set(values) == {
            "white_tag", "blue_tag", "green_tag", "orange_tag", "admin_tag", "supervisor_tag",
        }
        assert values["blue_tag"] is True
        assert values["white_tag"] is False
