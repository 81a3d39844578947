"""
Tests for Consideration scoring.
"""
import pytest

from behavior_engine import (
    NO_RESCALE,
    Consideration,
    ConstructionError,
    identity,
    inverted,
    linear_map,
    monotone,
)


class TestComputeScore:
    """Test normalisation, curve and clipping."""

    def test_rescales_into_unit_interval(self):
        c = Consideration("half", lambda: 5.0, identity(), (0.0, 10.0))
        assert c.compute_score() == 0.5

    def test_offset_range(self):
        c = Consideration("offset", lambda: 150.0, identity(), (100.0, 200.0))
        assert c.compute_score() == 0.5

    def test_curve_is_applied_after_rescale(self):
        c = Consideration("inv", lambda: 2.5, inverted(), (0.0, 10.0))
        assert c.compute_score() == 0.75

    @pytest.mark.parametrize("raw", [-1000.0, -1.0, 0.0, 3.3, 10.0, 11.0, 1e9])
    def test_always_clipped(self, raw):
        """Score stays in [0, 1] whatever the signal returns."""
        for curve in (identity(), linear_map(5.0, -2.0), monotone([(0, -1), (1, 2)])):
            c = Consideration("wild", lambda: raw, curve, (0.0, 10.0))
            assert 0.0 <= c.compute_score() <= 1.0

    def test_no_rescale_by_default(self):
        c = Consideration("raw", lambda: 0.3)
        assert c.input_range == NO_RESCALE
        assert not c.rescales
        assert c.compute_score() == 0.3

    def test_nan_scores_zero(self):
        c = Consideration("nan", lambda: float("nan"), identity(), (0.0, 1.0))
        assert c.compute_score() == 0.0

    def test_signal_is_sampled_every_time(self):
        values = iter([0.1, 0.9])
        c = Consideration("seq", lambda: next(values), identity(), (0.0, 1.0))
        assert c.compute_score() == 0.1
        assert c.compute_score() == 0.9


class TestConstruction:
    """Degenerate considerations are rejected at construction."""

    def test_equal_min_max_rejected(self):
        with pytest.raises(ConstructionError):
            Consideration("flat", lambda: 1.0, identity(), (5.0, 5.0))

    def test_inverted_range_rejected(self):
        with pytest.raises(ConstructionError):
            Consideration("backwards", lambda: 1.0, identity(), (10.0, 0.0))

    def test_malformed_range_rejected(self):
        with pytest.raises(ConstructionError):
            Consideration("bad", lambda: 1.0, identity(), ("low", "high"))

    def test_signal_must_be_callable(self):
        with pytest.raises(ConstructionError):
            Consideration("static", 0.5)

    def test_immutable(self):
        c = Consideration("frozen", lambda: 0.5)
        with pytest.raises(AttributeError):
            c.description = "changed"
