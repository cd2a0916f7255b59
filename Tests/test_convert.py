"""Tests for specbank.convert — frame geometry and unit conversions."""

import numpy as np
import pytest

from specbank import convert


# ---------------------------------------------------------------------------
# Frame geometry
# ---------------------------------------------------------------------------

class TestFrameCount:
    """Tests for convert.n_frames()."""

    @pytest.mark.parametrize("n_samples, hop, expected", [
        (17, 8, 3),
        (10, 8, 3),
        (9, 8, 2),
        (8, 8, 2),
        (1, 8, 1),
        (2, 1, 2),
        (32, 4, 9),
        (33, 4, 9),
        (34, 4, 10),
    ])
    def test_known_counts(self, n_samples, hop, expected):
        assert convert.n_frames(n_samples, hop) == expected

    def test_last_center_covers_last_sample(self):
        for n_samples in range(1, 60):
            for hop in (1, 2, 3, 7, 16):
                count = convert.n_frames(n_samples, hop)
                last_center = (count - 1) * hop
                assert last_center >= n_samples - 1
                # one frame fewer would leave the last sample uncovered
                assert last_center - hop < n_samples - 1 or count == 1

    def test_independent_of_transform_size(self):
        """Frame count is a function of the hop only."""
        from specbank import stft
        y = np.ones(50)
        assert stft(y, 8, 5).shape[1] == stft(y, 64, 5).shape[1] == convert.n_frames(50, 5)


class TestOutputLength:
    """Tests for convert.output_length()."""

    def test_known_lengths(self):
        assert convert.output_length(3, 8) == 17
        assert convert.output_length(9, 4) == 33
        assert convert.output_length(1, 5) == 1

    def test_round_trip_covers_input(self):
        for n_samples in range(1, 40):
            for hop in (1, 3, 8):
                length = convert.output_length(convert.n_frames(n_samples, hop), hop)
                assert n_samples <= length < n_samples + hop


# ---------------------------------------------------------------------------
# Frames <-> samples <-> time
# ---------------------------------------------------------------------------

class TestFrameConversions:

    def test_frames_to_samples_scalar(self):
        assert convert.frames_to_samples(3, 512) == 1536
        assert isinstance(convert.frames_to_samples(3, 512), int)

    def test_frames_to_samples_array(self):
        result = convert.frames_to_samples(np.arange(4), 10)
        np.testing.assert_array_equal(result, [0, 10, 20, 30])

    def test_samples_to_frames_nearest(self):
        assert convert.samples_to_frames(1535, 512) == 3
        assert convert.samples_to_frames(1279, 512) == 2
        # exactly between two centers: the later frame
        assert convert.samples_to_frames(1280, 512) == 3

    def test_samples_frames_inverse(self):
        frames = np.arange(20)
        np.testing.assert_array_equal(
            convert.samples_to_frames(convert.frames_to_samples(frames, 7), 7), frames
        )

    def test_frames_to_time(self):
        assert convert.frames_to_time(2, sr=100, hop_length=50) == pytest.approx(1.0)
        np.testing.assert_allclose(
            convert.frames_to_time([0, 1, 2], sr=8000, hop_length=400), [0.0, 0.05, 0.1]
        )


# ---------------------------------------------------------------------------
# Frequency bins
# ---------------------------------------------------------------------------

class TestFrequencies:

    def test_fft_frequencies(self):
        np.testing.assert_allclose(
            convert.fft_frequencies(sr=8000, n_fft=8), [0, 1000, 2000, 3000, 4000]
        )

    def test_fft_frequencies_shape(self):
        assert convert.fft_frequencies(22050, 2048).shape == (1025,)

    def test_band_frequencies(self):
        np.testing.assert_allclose(
            convert.band_frequencies(8),
            [0, np.pi / 4, np.pi / 2, 3 * np.pi / 4, np.pi],
        )

    def test_band_frequencies_match_fft_frequencies(self):
        """Radians/sample are Hz scaled by 2 pi / sr."""
        sr = 16000
        np.testing.assert_allclose(
            convert.band_frequencies(64),
            convert.fft_frequencies(sr, 64) * 2 * np.pi / sr,
        )
