"""Tests for trend removal."""

import dataclasses

import numpy as np
import pytest

from sysid.exceptions import InvalidArgumentError
from sysid.preprocessing.slicing import split_frame
from sysid.preprocessing.trend import TrendInfo, TrendType, detrend, retrend


class TestTrendType:
    """Tests for detrend mode coercion."""

    def test_coerce_numeric(self):
        """Test that 0 and 1 map to MEAN and LINEAR."""
        assert TrendType.coerce(0) is TrendType.MEAN
        assert TrendType.coerce(1) is TrendType.LINEAR

    def test_coerce_string(self):
        """Test case-insensitive string names."""
        assert TrendType.coerce("mean") is TrendType.MEAN
        assert TrendType.coerce("Linear") is TrendType.LINEAR

    def test_coerce_integral_float(self):
        """Test that 0.0 and 1.0 are accepted like 0 and 1."""
        assert TrendType.coerce(0.0) is TrendType.MEAN
        assert TrendType.coerce(1.0) is TrendType.LINEAR
        assert TrendType.coerce(np.float64(1.0)) is TrendType.LINEAR

    @pytest.mark.parametrize("value", [2, -1, "quadratic", None, 0.5, True, 2.0, float("nan"), float("inf")])
    def test_coerce_invalid(self, value):
        """Test that unknown modes are rejected."""
        with pytest.raises(InvalidArgumentError):
            TrendType.coerce(value)


class TestTrendInfo:
    """Tests for the TrendInfo value type."""

    def test_default_is_empty(self):
        """Test default TrendInfo has no channels."""
        tr = TrendInfo()

        assert tr.n_input_series == 0
        assert tr.n_output_series == 0

    def test_length_mismatch(self):
        """Test offset/slope length mismatch is rejected."""
        with pytest.raises(InvalidArgumentError):
            TrendInfo(output_offset=[1.0, 2.0], output_slope=[0.0])

    def test_immutable(self):
        """Test fields and arrays cannot be modified."""
        tr = TrendInfo(output_offset=[1.0], output_slope=[0.5])

        with pytest.raises(dataclasses.FrozenInstanceError):
            tr.output_offset = np.array([2.0])
        with pytest.raises(ValueError):
            tr.output_offset[0] = 2.0

    def test_dict_conversion(self):
        """Test to_dict/from_dict keep coefficients."""
        tr = TrendInfo(input_offset=[1.0], input_slope=[2.0], output_offset=[3.0, 4.0], output_slope=[5.0, 6.0])

        restored = TrendInfo.from_dict(tr.to_dict())

        assert restored.to_dict() == tr.to_dict()


class TestMeanDetrend:
    """Tests for mean removal."""

    def test_zero_mean(self, trend_frame):
        """Test each channel has zero mean after mean removal."""
        result, tr = detrend(trend_frame, TrendType.MEAN)

        np.testing.assert_allclose(result.output.mean().to_numpy(), 0.0, atol=1e-10)
        np.testing.assert_allclose(result.input.mean().to_numpy(), 0.0, atol=1e-10)

    def test_trend_info(self, trend_frame):
        """Test offsets are the channel means and slopes are zero."""
        _, tr = detrend(trend_frame)

        np.testing.assert_allclose(tr.output_offset, trend_frame.output.mean().to_numpy())
        np.testing.assert_allclose(tr.input_offset, trend_frame.input.mean().to_numpy())
        assert np.all(tr.output_slope == 0)
        assert np.all(tr.input_slope == 0)

    def test_keeps_time_base_and_names(self, trend_frame):
        """Test the time base and channel names are unchanged."""
        result, _ = detrend(trend_frame)

        assert result.time_base == trend_frame.time_base
        assert result.output_names == trend_frame.output_names
        assert result.input_names == trend_frame.input_names

    def test_does_not_mutate_input(self, trend_frame):
        """Test the original frame keeps its values."""
        before = trend_frame.output_data()

        detrend(trend_frame)

        np.testing.assert_array_equal(trend_frame.output.to_numpy(), before.to_numpy())

    def test_numeric_mode(self, trend_frame):
        """Test mode 0 behaves like TrendType.MEAN."""
        a, _ = detrend(trend_frame, 0)
        b, _ = detrend(trend_frame, TrendType.MEAN)

        np.testing.assert_array_equal(a.output.to_numpy(), b.output.to_numpy())

    def test_float_mode(self, trend_frame):
        """Test mode 1.0 behaves like TrendType.LINEAR."""
        a, tr_a = detrend(trend_frame, 1.0)
        b, tr_b = detrend(trend_frame, TrendType.LINEAR)

        np.testing.assert_array_equal(a.output.to_numpy(), b.output.to_numpy())
        np.testing.assert_array_equal(tr_a.output_slope, tr_b.output_slope)


class TestLinearDetrend:
    """Tests for least-squares linear detrending."""

    def test_residual_uncorrelated_with_time(self, trend_frame):
        """Test residuals have zero covariance with time."""
        result, _ = detrend(trend_frame, TrendType.LINEAR)
        t = trend_frame.time()

        for col in result.output.columns:
            cov = np.cov(t, result.output[col].to_numpy())[0, 1]
            assert cov == pytest.approx(0.0, abs=1e-8)
        cov = np.cov(t, result.input.iloc[:, 0].to_numpy())[0, 1]
        assert cov == pytest.approx(0.0, abs=1e-8)

    def test_recovers_coefficients(self, trend_frame):
        """Test fitted offset/slope are close to the generating trend."""
        _, tr = detrend(trend_frame, TrendType.LINEAR)

        np.testing.assert_allclose(tr.output_slope, [0.2, -1.5], atol=0.01)
        np.testing.assert_allclose(tr.output_offset, [5.0, -3.0], atol=0.5)
        np.testing.assert_allclose(tr.input_slope, [0.05], atol=0.01)

    def test_uses_time_coordinates(self):
        """Test the regression uses actual time, not the sample index."""
        from sysid.frame import IdentificationFrame

        t = 100.0 + np.arange(20) * 2.0
        frame = IdentificationFrame.from_arrays(output=3.0 + 0.5 * t, interval=2.0, start=100.0)

        result, tr = detrend(frame, TrendType.LINEAR)

        assert tr.output_offset[0] == pytest.approx(3.0)
        assert tr.output_slope[0] == pytest.approx(0.5)
        np.testing.assert_allclose(result.output.to_numpy(), 0.0, atol=1e-9)

    def test_missing_values_ignored_in_fit(self):
        """Test NaNs are dropped from the fit and stay NaN in the result."""
        from sysid.frame import IdentificationFrame

        y = 1.0 + 2.0 * np.arange(10, dtype=float)
        y[3] = np.nan
        frame = IdentificationFrame.from_arrays(output=y)

        result, tr = detrend(frame, "linear")

        assert tr.output_slope[0] == pytest.approx(2.0)
        assert np.isnan(result.output.iloc[3, 0])

    def test_too_few_samples(self):
        """Test a channel with fewer than two valid samples is rejected."""
        from sysid.frame import IdentificationFrame

        frame = IdentificationFrame.from_arrays(output=[np.nan, 1.0, np.nan])

        with pytest.raises(InvalidArgumentError):
            detrend(frame, TrendType.LINEAR)


class TestApplyTrend:
    """Tests for applying a previously computed trend."""

    def test_reapply_reproduces_linear_residual(self, trend_frame):
        """Test applying the fitted TrendInfo gives the identical residual."""
        first, tr = detrend(trend_frame, TrendType.LINEAR)
        second, tr2 = detrend(trend_frame, tr)

        assert tr2 is tr
        np.testing.assert_array_equal(first.output.to_numpy(), second.output.to_numpy())
        np.testing.assert_array_equal(first.input.to_numpy(), second.input.to_numpy())

    def test_train_test_transfer(self, trend_frame):
        """Test the training offsets are subtracted from test data without refitting."""
        train, test = split_frame(trend_frame, at=trend_frame.time()[149])

        _, tr = detrend(train)
        test_detrended, _ = detrend(test, tr)

        expected = test.output.to_numpy() - tr.output_offset
        np.testing.assert_array_equal(test_detrended.output.to_numpy(), expected)
        # A refit on the test segment would give a zero mean; the transferred trend does not
        assert abs(test_detrended.output.mean().iloc[0]) > 1.0

    def test_channel_count_mismatch(self, trend_frame):
        """Test a TrendInfo with the wrong channel count is rejected."""
        tr = TrendInfo(output_offset=[0.0], output_slope=[0.0], input_offset=[0.0], input_slope=[0.0])

        with pytest.raises(InvalidArgumentError):
            detrend(trend_frame, tr)

    def test_invalid_mode_leaves_frame_untouched(self, trend_frame):
        """Test an invalid mode fails before any transform."""
        before = trend_frame.output_data()

        with pytest.raises(InvalidArgumentError, match="invalid trend type"):
            detrend(trend_frame, 5)

        np.testing.assert_array_equal(trend_frame.output.to_numpy(), before.to_numpy())


class TestRetrend:
    """Tests for adding a trend back."""

    def test_round_trip(self, trend_frame):
        """Test retrend undoes detrend."""
        result, tr = detrend(trend_frame, TrendType.LINEAR)

        restored = retrend(result, tr)

        np.testing.assert_allclose(restored.output.to_numpy(), trend_frame.output.to_numpy(), rtol=1e-12, atol=1e-9)
        np.testing.assert_allclose(restored.input.to_numpy(), trend_frame.input.to_numpy(), rtol=1e-12, atol=1e-9)

    def test_requires_trend_info(self, trend_frame):
        """Test retrend rejects non-TrendInfo values."""
        with pytest.raises(InvalidArgumentError):
            retrend(trend_frame, TrendType.MEAN)


class TestZeroChannelSide:
    """Tests for frames without input channels."""

    @pytest.mark.parametrize("mode", [TrendType.MEAN, TrendType.LINEAR])
    def test_input_side_skipped(self, output_only_frame, mode):
        """Test the empty input side stays empty and TrendInfo input fields are empty."""
        result, tr = detrend(output_only_frame, mode)

        assert result.n_input_series == 0
        assert tr.n_input_series == 0
        assert tr.n_output_series == 2

    def test_apply_with_empty_input_trend(self, output_only_frame):
        """Test applying a TrendInfo without input coefficients."""
        _, tr = detrend(output_only_frame)

        result, _ = detrend(output_only_frame, tr)

        assert result.n_input_series == 0
