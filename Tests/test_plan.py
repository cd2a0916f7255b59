"""Tests for specbank.STFTPlan."""

import json

import numpy as np
import pytest

from specbank import ConfigurationError, STFTPlan, filters, istft, stft


class TestConstruction:

    def test_defaults(self):
        plan = STFTPlan(n_fft=16)
        assert plan.hop == 8
        assert plan.n_bins == 9
        assert plan.window == "rect"
        assert plan.demod is False

    @pytest.mark.parametrize("kwargs, match", [
        ({"n_fft": 7}, "n_fft"),
        ({"n_fft": 0}, "n_fft"),
        ({"n_fft": 8, "hop_length": 0}, "hop_length"),
        ({"n_fft": 8, "hop_length": 2.0}, "hop_length"),
        ({"n_fft": 8, "out_n_fft": 5}, "out_n_fft"),
        ({"n_fft": 8, "hop_length": 3, "out_n_fft": 4}, "not an integer"),
        ({"n_fft": 8, "out_hop": -1}, "out_hop"),
        ({"n_fft": 8, "n_jobs": 0}, "n_jobs"),
        ({"n_fft": 8, "window": "nope"}, "Unknown window"),
        ({"n_fft": 8, "synthesis_window": ("nope", 1)}, "Unknown window"),
    ])
    def test_invalid(self, kwargs, match):
        with pytest.raises(ConfigurationError, match=match):
            STFTPlan(**kwargs)

    def test_frozen(self):
        plan = STFTPlan(n_fft=8)
        with pytest.raises(AttributeError):
            plan.n_fft = 16

    def test_from_dict(self):
        plan = STFTPlan.from_dict({"n_fft": 32, "hop_length": 8, "window": "hann"})
        assert plan.to_dict() == STFTPlan(32, 8, "hann").to_dict()

    def test_bad_window_params_rejected_on_construction(self):
        with pytest.raises(ConfigurationError, match="does not take parameters"):
            STFTPlan(16, 4, window=("hann", 0.3))

    def test_array_window_hashable(self):
        plan = STFTPlan(8, 4, window=np.ones(8))
        assert {plan: 1}[plan] == 1
        assert plan == plan
        assert plan != STFTPlan(8, 4, window=np.ones(8))

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown STFTPlan settings"):
            STFTPlan.from_dict({"n_fft": 32, "hop": 8})

    def test_from_dict_requires_n_fft(self):
        with pytest.raises(ConfigurationError, match="n_fft"):
            STFTPlan.from_dict({"hop_length": 8})

    def test_to_dict_inverse(self):
        plan = STFTPlan(64, 16, window="hann", synthesis_window="rect", demod=True)
        assert STFTPlan.from_dict(plan.to_dict()).to_dict() == plan.to_dict()

    def test_json_round_trip_keeps_window_params(self):
        y = np.random.default_rng(5).standard_normal(64)
        plan = STFTPlan(16, 4, window=("gaussian", 0.1), synthesis_window=["hann"])
        restored = STFTPlan.from_dict(json.loads(json.dumps(plan.to_dict())))
        assert restored.window == ("gaussian", 0.1)
        assert restored.synthesis_window == ("hann",)
        np.testing.assert_array_equal(restored.stft(y), plan.stft(y))
        np.testing.assert_array_equal(restored.round_trip(y), plan.round_trip(y))


class TestGeometry:

    def test_n_frames(self):
        assert STFTPlan(8, 8).n_frames(17) == 3

    def test_output_length(self):
        assert STFTPlan(8, 8).output_length(3) == 17
        assert STFTPlan(8, 4, out_n_fft=16).output_length(3) == 17
        assert STFTPlan(8, 4, out_hop=2).output_length(3) == 5


class TestTransforms:

    def test_stft_matches_function(self):
        y = np.random.default_rng(0).standard_normal(100)
        plan = STFTPlan(16, 4, window="hann", demod=True)
        np.testing.assert_array_equal(
            plan.stft(y), stft(y, 16, 4, window="hann", demod=True)
        )

    def test_istft_uses_synthesis_window(self):
        y = np.random.default_rng(1).standard_normal(100)
        plan = STFTPlan(16, 8, window="hann", synthesis_window="rect")
        X = plan.stft(y)
        np.testing.assert_array_equal(plan.istft(X), istft(X, 16, 8, window="rect"))

    def test_istft_falls_back_to_analysis_window(self):
        y = np.random.default_rng(2).standard_normal(100)
        plan = STFTPlan(16, 8, window="cosine")
        X = plan.stft(y)
        np.testing.assert_array_equal(plan.istft(X), istft(X, 16, 8, window="cosine"))

    def test_round_trip(self):
        y = np.random.default_rng(3).standard_normal(100)
        out = STFTPlan(16, 8, window=filters.hann, synthesis_window=filters.rect).round_trip(y)
        assert len(out) == 105
        np.testing.assert_allclose(out[:100], y, atol=1e-10)

    def test_round_trip_threaded(self):
        y = np.random.default_rng(4).standard_normal(1000)
        serial = STFTPlan(32, 8, window="hann", demod=True).round_trip(y)
        threaded = STFTPlan(32, 8, window="hann", demod=True, n_jobs=3).round_trip(y)
        np.testing.assert_allclose(threaded, serial, atol=1e-12)
