# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for the wave table."""

from __future__ import annotations

import pytest

from blaster.simulation.enemy_types import is_known_type
from blaster.simulation.formations import FormationGenerator
from blaster.simulation.waves_defs import (
    FINAL_ROUND,
    FLYBY_TYPES,
    get_wave_layout,
    is_boss_wave,
    waves_in_round,
)

pytestmark = pytest.mark.unit


class TestRoundShape:
    def test_wave_counts(self):
        assert [waves_in_round(r) for r in (1, 2, 3)] == [5, 7, 8]

    def test_unknown_round_has_no_waves(self):
        assert waves_in_round(4) == 0
        assert get_wave_layout(4, 1) is None

    def test_last_wave_is_boss_wave(self):
        for r in range(1, FINAL_ROUND + 1):
            assert is_boss_wave(r, waves_in_round(r))
            assert not is_boss_wave(r, 1)

    def test_out_of_range_wave(self):
        assert get_wave_layout(1, 0) is None
        assert get_wave_layout(1, 6) is None


class TestLayoutCopies:
    def test_layout_is_a_private_copy(self):
        a = get_wave_layout(1, 1)
        a["enemies"].clear()
        assert get_wave_layout(1, 1)["enemies"]

    def test_every_wave_names_a_drift(self):
        for r in range(1, FINAL_ROUND + 1):
            for w in range(1, waves_in_round(r) + 1):
                assert "movement" in get_wave_layout(r, w)


class TestTypesResolve:
    def test_all_spawned_types_are_known(self):
        gen = FormationGenerator()
        for r in range(1, FINAL_ROUND + 1):
            for w in range(1, waves_in_round(r) + 1):
                for entry in gen.build(get_wave_layout(r, w)):
                    assert is_known_type(entry.type_id), entry.type_id

    def test_flyby_types_known(self):
        for types in FLYBY_TYPES.values():
            assert all(is_known_type(t) for t in types)
