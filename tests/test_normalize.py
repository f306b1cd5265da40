"""Tests for business-name normalization."""

from __future__ import annotations

import pytest

from arobid_participation.core.normalize import normalize_text


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Acme Co", "acme co"),
        ("  ACME   CO.  ", "acme co."),
        ("Công Ty Cổ Phần Việt", "cong ty co phan viet"),
        ("Café\tDéjà\nVu", "cafe deja vu"),
        ("", ""),
        ("   ", ""),
    ],
)
def test_normalize_text(raw, expected):
    assert normalize_text(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["Acme Co", "ÀÉÎÕÜ  ñ", "İstanbul Fuarı", "Straße", "  mixed spaces ", "한국 전시회", ""],
)
def test_normalize_text_is_idempotent(raw):
    once = normalize_text(raw)
    assert normalize_text(once) == once
