"""
Tests for density profiles
"""

import pytest
from espic1d.density import DensityProfile, density_at
from espic1d.errors import DensityConfigError


class TestSimpleProfiles:
    """Uniform, step and slab profiles."""

    def test_uniform_everywhere(self):
        profile = DensityProfile(n=2.5)

        for x in [-10.0, 0.0, 3.7, 1e6]:
            assert density_at(profile, x) == 2.5

    def test_uniform_ignores_bounds(self):
        """Uniform profile does not care about start/end ordering."""
        profile = DensityProfile(type="uniform", start=5.0, end=1.0)

        assert density_at(profile, 0.0) == 1.0

    def test_step(self):
        profile = DensityProfile(type="step", n=3.0, start=2.0)

        assert density_at(profile, 1.999) == 0.0
        assert density_at(profile, 2.0) == 3.0
        assert density_at(profile, 50.0) == 3.0

    def test_slab_is_half_open(self):
        profile = DensityProfile(type="slab", start=1.0, end=4.0)

        assert density_at(profile, 0.5) == 0.0
        assert density_at(profile, 1.0) == 1.0
        assert density_at(profile, 3.999) == 1.0
        assert density_at(profile, 4.0) == 0.0

    def test_empty_slab_allowed(self):
        profile = DensityProfile(type="slab", start=2.0, end=2.0)

        assert density_at(profile, 2.0) == 0.0


class TestRampProfile:
    """Linear ramp profile."""

    @pytest.mark.parametrize(
        "start, end, ramp, n",
        [
            (0.0, 1.0, (0.1, 0.7), 1.0),
            (2.5, 7.3, (1.0, 0.0), 3.3),
            (-1.0, 4.0, (0.3, 0.9), 0.7),
            (0.1, 0.2, (2.0, 5.0), 1e-3),
        ],
    )
    def test_ramp_endpoints_exact(self, start, end, ramp, n):
        """Ramp hits ramp[0]*n at start and ramp[1]*n at end exactly."""
        profile = DensityProfile(type="ramp", n=n, start=start, end=end, ramp=ramp)

        assert density_at(profile, start) == ramp[0] * n
        assert density_at(profile, end) == ramp[1] * n

    def test_ramp_midpoint(self):
        profile = DensityProfile(type="ramp", n=2.0, start=0.0, end=10.0, ramp=(1.0, 3.0))

        assert density_at(profile, 5.0) == pytest.approx(4.0)
        assert density_at(profile, 2.5) == pytest.approx(3.0)

    def test_ramp_zero_outside(self):
        profile = DensityProfile(type="ramp", start=1.0, end=2.0, ramp=(1.0, 1.0))

        assert density_at(profile, 0.99) == 0.0
        assert density_at(profile, 2.01) == 0.0


class TestCustomProfile:
    """User-supplied density functions."""

    def test_closure(self):
        profile = DensityProfile(type="custom", n=2.0, custom=lambda x: 0.5 * x)

        assert density_at(profile, 3.0) == pytest.approx(3.0)

    def test_custom_data(self):
        """Context object is passed as second argument."""
        data = {"level": 0.25}
        profile = DensityProfile(
            type="custom", custom=lambda x, d: d["level"], custom_data=data
        )

        assert density_at(profile, 1.0) == 0.25

        # The profile only holds a reference
        data["level"] = 0.75
        assert density_at(profile, 1.0) == 0.75

    def test_missing_evaluator_rejected(self):
        with pytest.raises(DensityConfigError, match="callable"):
            DensityProfile(type="custom")

    def test_missing_evaluator_at_evaluation(self):
        profile = DensityProfile(type="custom", custom=lambda x: 1.0)
        profile.custom = None

        with pytest.raises(DensityConfigError, match="no evaluator"):
            density_at(profile, 0.0)

    def test_negative_density_rejected(self):
        profile = DensityProfile(type="custom", custom=lambda x: -1.0)

        with pytest.raises(DensityConfigError, match="non-negative"):
            density_at(profile, 0.0)

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_non_finite_density_rejected(self, value):
        profile = DensityProfile(type="custom", custom=lambda x: value)

        with pytest.raises(DensityConfigError, match="finite"):
            density_at(profile, 0.0)

    def test_no_context_means_single_argument(self):
        """Without custom_data the evaluator is called with x alone."""
        calls = []
        profile = DensityProfile(type="custom", custom=lambda *args: calls.append(args) or 1.0)

        density_at(profile, 0.5)

        assert calls == [(0.5,)]

    def test_context_passed_as_second_argument(self):
        calls = []
        data = object()
        profile = DensityProfile(
            type="custom",
            custom=lambda *args: calls.append(args) or 1.0,
            custom_data=data,
        )

        density_at(profile, 0.5)

        assert calls == [(0.5, data)]

    def test_evaluation_is_pure(self):
        """Evaluating never touches the injection counters."""
        profile = DensityProfile(type="custom", custom=lambda x: 1.0)

        for x in range(10):
            density_at(profile, float(x))

        assert profile.total_np_inj == 0
        assert profile.custom_q_inj == 0.0


class TestValidation:
    """Configuration errors."""

    def test_unknown_type(self):
        with pytest.raises(DensityConfigError, match="Unknown density type"):
            DensityProfile(type="gaussian")

    def test_negative_reference_density(self):
        with pytest.raises(DensityConfigError):
            DensityProfile(n=-1.0)

    def test_reversed_slab(self):
        with pytest.raises(DensityConfigError):
            DensityProfile(type="slab", start=3.0, end=1.0)

    def test_degenerate_ramp(self):
        with pytest.raises(DensityConfigError):
            DensityProfile(type="ramp", start=1.0, end=1.0, ramp=(0.0, 1.0))

    def test_negative_ramp(self):
        with pytest.raises(DensityConfigError):
            DensityProfile(type="ramp", start=0.0, end=1.0, ramp=(-0.5, 1.0))

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            DensityProfile(type="slab", start=3.0, end=1.0)

    def test_copy_resets_counters(self):
        profile = DensityProfile(type="step", start=1.0)
        profile.total_np_inj = 10
        profile.custom_q_inj = 10.0

        clone = profile.copy()

        assert clone.type == "step"
        assert clone.start == 1.0
        assert clone.total_np_inj == 0
        assert clone.custom_q_inj == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
