"""Tests for answer option normalization."""

import pytest

from aceapt.answers.service import normalize_option
from aceapt.errors import ValidationError


class TestNormalizeOption:
    @pytest.mark.parametrize("raw", ["A", "a", " b ", "C\n", "d"])
    def test_accepts_options_ignoring_case_and_space(self, raw):
        assert normalize_option(raw) == raw.strip().upper()

    @pytest.mark.parametrize("raw", ["E", "", "   ", "AB", "1", "option a"])
    def test_rejects_anything_else(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            normalize_option(raw)
        assert exc_info.value.status_code == 400
        assert "A, B, C or D" in exc_info.value.message
