"""Frame geometry and unit conversions: frames/samples/time, frequency bins.

``n_frames`` and ``output_length`` are the only place the frame-count
arithmetic lives; analysis and synthesis both call them.
"""

import numpy as np


# ---------------------------------------------------------------------------
# Frame geometry
# ---------------------------------------------------------------------------

def n_frames(n_samples, hop_length):
    """Number of frames needed to cover a signal.

    Frame 0 is centered on the first sample and the last frame is centered
    on or past the last sample, so every sample falls under at least one
    frame center's neighbourhood.  The count depends only on the hop, not
    on the transform size.

    Parameters
    ----------
    n_samples : int
        Signal length ``L``.
    hop_length : int
        Samples between frame centers.

    Returns
    -------
    int
        ``ceil((L - 1) / hop_length) + 1``.
    """
    return -(-(int(n_samples) - 1) // int(hop_length)) + 1


def output_length(n_frames, hop_length):
    """Length of the signal reconstructed from ``n_frames`` frames.

    The output starts at the center of the first frame and ends at the
    center of the last one: ``(n_frames - 1) * hop_length + 1``.
    """
    return max(0, (int(n_frames) - 1) * int(hop_length) + 1)


# ---------------------------------------------------------------------------
# Frames <-> samples <-> time
# ---------------------------------------------------------------------------

def frames_to_samples(frames, hop_length):
    """Convert frame indices to the (0-based) sample index of their center.

    Parameters
    ----------
    frames : int or np.ndarray
        Frame index/indices.
    hop_length : int
        Hop length.

    Returns
    -------
    int or np.ndarray
        Center sample index/indices.
    """
    frames = np.asarray(frames)
    samples = frames.astype(np.int64) * int(hop_length)
    return int(samples) if frames.ndim == 0 else samples


def samples_to_frames(samples, hop_length):
    """Convert sample indices to the index of the nearest frame center.

    Ties go to the later frame.
    """
    samples = np.asarray(samples)
    hop_length = int(hop_length)
    frames = (samples.astype(np.int64) + hop_length // 2) // hop_length
    return int(frames) if samples.ndim == 0 else frames


def frames_to_time(frames, sr=22050, hop_length=512):
    """Convert frame indices to the time (seconds) of their center."""
    frames = np.asarray(frames)
    times = frames.astype(np.float64) * hop_length / float(sr)
    return float(times) if frames.ndim == 0 else times


# ---------------------------------------------------------------------------
# Frequency bins
# ---------------------------------------------------------------------------

def fft_frequencies(sr=22050, n_fft=2048):
    """Center frequency in Hz of each spectrum row, DC to Nyquist.

    Returns
    -------
    np.ndarray
        Shape ``(n_fft // 2 + 1,)``, values ``k * sr / n_fft``.
    """
    return np.arange(n_fft // 2 + 1, dtype=np.float64) * sr / n_fft


def band_frequencies(n_fft):
    """Center frequency in radians/sample of each spectrum row.

    These are the frequencies removed by demodulation: ``k * pi / (n_fft / 2)``
    for ``k = 0 .. n_fft // 2``, spanning 0 to pi.
    """
    half = n_fft // 2
    return np.arange(half + 1, dtype=np.float64) * np.pi / half
