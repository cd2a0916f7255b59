"""Short-time Fourier analysis and overlap-add resynthesis.

Frame ``c`` is centered on sample ``c * hop_length`` and rotated so its
center sits at FFT buffer index 0, which keeps each frame's phase
reference at its center instead of adding a linear phase ramp.  The
signal is zero-padded on both sides as needed; the last frame is centered
on or past the last sample.

``istft(stft(y, n), n)[:len(y)]`` reproduces ``y`` whenever the product of
the analysis and synthesis windows is constant-overlap-add (COLA) at the
hop, scaled by that constant.  COLA is not checked.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from ._buffer import gather_frames, overlap_add
from .convert import band_frequencies, n_frames, output_length
from .exceptions import ConfigurationError
from .filters import rect, resolve_window

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _is_integer(value):
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def _check_n_fft(n_fft, name="n_fft"):
    if not _is_integer(n_fft) or n_fft <= 0 or n_fft % 2:
        raise ConfigurationError(f"{name} must be a positive even integer, got {n_fft!r}")
    return int(n_fft)


def _check_hop(hop, name="hop_length"):
    if not _is_integer(hop) or hop <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {hop!r}")
    return int(hop)


def _check_jobs(n_jobs):
    if n_jobs is None:
        return 1
    if not _is_integer(n_jobs) or n_jobs == 0 or n_jobs < -1:
        raise ConfigurationError(f"n_jobs must be a positive integer or -1, got {n_jobs!r}")
    if n_jobs == -1:
        return os.cpu_count() or 1
    return int(n_jobs)


def _as_signal(y):
    if y is None:
        raise ConfigurationError("y must be provided")
    y = np.asarray(y)
    if np.iscomplexobj(y):
        raise ConfigurationError("y must be real-valued")
    if y.ndim != 1:
        raise ConfigurationError(f"y must be 1-D, got shape {y.shape}")
    if len(y) == 0:
        raise ConfigurationError("y must contain at least one sample")
    if y.dtype != np.float32:
        y = y.astype(np.float64, copy=False)
    return y


def _as_spectrum(X):
    if X is None:
        raise ConfigurationError("X must be provided")
    X = np.asarray(X)
    if X.ndim != 2:
        raise ConfigurationError(f"X must be 2-D (bins, frames), got shape {X.shape}")
    if X.shape[0] < 2:
        raise ConfigurationError(f"X must have at least 2 frequency bins, got {X.shape[0]}")
    return X.astype(np.result_type(X.dtype, np.complex64), copy=False)


# ---------------------------------------------------------------------------
# Frame scheduling
# ---------------------------------------------------------------------------

def _map_frames(func, count, n_jobs):
    """Apply ``func`` to contiguous slices of ``range(count)``.

    With one worker ``func`` sees a single slice covering every frame;
    otherwise the slices run on a thread pool (numpy's FFT releases the
    GIL).  Results come back in frame order.
    """
    workers = min(n_jobs, count)
    if workers <= 1:
        return [func(slice(0, count))]
    bounds = np.linspace(0, count, workers + 1).astype(int)
    blocks = [slice(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:])]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(func, blocks))


# ---------------------------------------------------------------------------
# Demodulation
# ---------------------------------------------------------------------------

def _band_phase(shape, hop_length, sign):
    n_bins, count = shape
    omega = band_frequencies(2 * (n_bins - 1))
    n = np.arange(count, dtype=np.float64) * hop_length
    return np.exp(sign * 1j * np.outer(omega, n))


def demodulate(X, hop_length):
    """Remove each band's center-frequency phase progression.

    Multiplies bin ``k`` of frame ``c`` by
    ``exp(-1j * (c * hop_length) * (k * pi / (n_bins - 1)))``, turning the
    frames into a sliding-window STFT whose phase evolves at the offset
    from the band center rather than at the signal frequency.

    Parameters
    ----------
    X : np.ndarray
        Complex spectrum, shape ``(n_bins, n_frames)``.
    hop_length : int
        Hop length ``X`` was analyzed with.

    Returns
    -------
    np.ndarray
        Demodulated spectrum, same shape and precision as ``X``.
    """
    X = _as_spectrum(X)
    hop_length = _check_hop(hop_length)
    return (X * _band_phase(X.shape, hop_length, -1)).astype(X.dtype, copy=False)


def remodulate(X, hop_length):
    """Inverse of :func:`demodulate`."""
    X = _as_spectrum(X)
    hop_length = _check_hop(hop_length)
    return (X * _band_phase(X.shape, hop_length, 1)).astype(X.dtype, copy=False)


def band(X, k, hop_length=None):
    """Return the time series of frequency bin ``k`` across frames.

    Parameters
    ----------
    X : np.ndarray
        Complex spectrum, shape ``(n_bins, n_frames)``, not demodulated.
    k : int
        Bin index. Negative indices count from Nyquist.
    hop_length : int or None
        If given, the band is demodulated by its center frequency using
        this hop length.

    Returns
    -------
    np.ndarray
        Shape ``(n_frames,)``.
    """
    X = _as_spectrum(X)
    row = X[k]
    if hop_length is None:
        return row.copy()
    hop_length = _check_hop(hop_length)
    k = range(X.shape[0])[k]
    omega = k * np.pi / (X.shape[0] - 1)
    n = np.arange(X.shape[1], dtype=np.float64) * hop_length
    return (row * np.exp(-1j * omega * n)).astype(X.dtype, copy=False)


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

def stft(y, n_fft=2048, hop_length=None, window=rect, demod=False, n_jobs=1):
    """Compute the complex Short-Time Fourier Transform.

    Parameters
    ----------
    y : np.ndarray
        Real signal (1-D). float32 is kept; everything else is analyzed
        as float64.
    n_fft : int
        FFT size (positive, even). Default: 2048.
    hop_length : int or None
        Samples between frame centers. Default: ``n_fft // 2``.
    window : array-like, callable, str, tuple, or None
        Analysis window: ``n_fft`` zero-phase samples, a generator called
        as ``window(n_fft, zerophase=True)``, a window name understood by
        :func:`specbank.filters.get_window`, or a tagged
        :class:`~specbank.filters.ExplicitWindow` /
        :class:`~specbank.filters.GeneratedWindow`. Default: rectangular.
    demod : bool
        Demodulate each band by its center frequency (see
        :func:`demodulate`). Default: False.
    n_jobs : int or None
        Worker threads for framing and FFT. -1 uses every CPU.
        Default: 1.

    Returns
    -------
    np.ndarray
        Complex spectrum, shape ``(n_fft // 2 + 1, ceil((len(y) - 1) / hop_length) + 1)``.
        complex64 for float32 input, complex128 otherwise.

    Raises
    ------
    ConfigurationError
        For an odd or non-positive ``n_fft``, a non-positive ``hop_length``,
        a window whose length is not ``n_fft``, or a malformed ``y``.
    """
    n_fft = _check_n_fft(n_fft)
    hop = _check_hop(n_fft // 2 if hop_length is None else hop_length)
    jobs = _check_jobs(n_jobs)
    y = _as_signal(y)
    win = resolve_window(window, n_fft).astype(y.dtype)

    count = n_frames(len(y), hop)
    centers = np.arange(count) * hop
    logger.debug("stft: %d samples -> %d frames (n_fft=%d, hop=%d, demod=%s)",
                 len(y), count, n_fft, hop, demod)

    X = np.zeros((n_fft // 2 + 1, count), dtype=np.result_type(y.dtype, np.complex64))

    def analyze(block):
        frames = gather_frames(y, centers[block], n_fft)
        frames *= win[:, np.newaxis]
        X[:, block] = np.fft.rfft(frames, axis=0)

    _map_frames(analyze, count, jobs)

    if demod:
        X = demodulate(X, hop)
    return X


# ---------------------------------------------------------------------------
# Synthesis
# ---------------------------------------------------------------------------

def _resolve_out_hop(out_hop, hop, n_fft, out_n_fft):
    if out_hop is None:
        out_hop, remainder = divmod(out_n_fft * hop, n_fft)
        if remainder:
            raise ConfigurationError(
                f"out_n_fft * hop_length / n_fft = {out_n_fft} * {hop} / {n_fft} "
                "is not an integer; pass out_hop explicitly"
            )
        return out_hop
    out_hop = _check_hop(out_hop, "out_hop")
    if out_hop * n_fft != hop * out_n_fft:
        logger.warning(
            "istft: out_hop=%d is not out_n_fft/n_fft times hop_length=%d; "
            "time-stretched resynthesis is experimental and not amplitude-correct",
            out_hop, hop,
        )
    return out_hop


def istft(X, n_fft=None, hop_length=None, out_n_fft=None, out_hop=None,
          window=rect, demod=False, n_jobs=1):
    """Inverse STFT by windowed overlap-add.

    Parameters
    ----------
    X : np.ndarray
        Complex spectrum, shape ``(n_fft // 2 + 1, n_frames)``. Real input
        is treated as ``real + 0j``.
    n_fft : int or None
        FFT size ``X`` was computed with. Default: ``2 * (X.shape[0] - 1)``.
    hop_length : int or None
        Hop length of the frames in ``X``. Default: ``n_fft // 2``.
    out_n_fft : int or None
        Inverse FFT size used for resynthesis. Each column is zero-padded
        or truncated to ``out_n_fft // 2 + 1`` bins. Default: ``n_fft``.
    out_hop : int or None
        Hop between resynthesized frames. Default:
        ``out_n_fft * hop_length / n_fft``, which must be an integer.
        Other values give basic time stretching (phases are not adjusted).
    window : array-like, callable, str, tuple, or None
        Synthesis window of length ``out_n_fft``, in any form accepted by
        :func:`stft`. Default: rectangular.
    demod : bool
        ``X`` was demodulated (``stft(..., demod=True)``). Default: False.
    n_jobs : int or None
        Worker threads. Each worker overlap-adds into a private buffer
        and the buffers are summed. Default: 1.

    Returns
    -------
    np.ndarray
        Reconstructed signal, length ``(n_frames - 1) * out_hop + 1``.
        float32 for complex64 input, float64 otherwise.

    Raises
    ------
    ConfigurationError
        For odd or non-positive FFT sizes, non-positive hops, a row count
        that does not match ``n_fft``, or a window whose length is not
        ``out_n_fft``.

    Notes
    -----
    The first and last frames are not renormalized for the zero padding
    under the window, so a few samples at either end may come back with
    a slightly different gain than the COLA constant.
    """
    X = _as_spectrum(X)
    n_fft = _check_n_fft(2 * (X.shape[0] - 1) if n_fft is None else n_fft)
    if X.shape[0] != n_fft // 2 + 1:
        raise ConfigurationError(
            f"X has {X.shape[0]} frequency bins but n_fft={n_fft} needs {n_fft // 2 + 1}"
        )
    if X.shape[1] == 0:
        raise ConfigurationError("X must contain at least one frame")
    hop = _check_hop(n_fft // 2 if hop_length is None else hop_length)
    out_n_fft = _check_n_fft(n_fft if out_n_fft is None else out_n_fft, "out_n_fft")
    out_hop = _resolve_out_hop(out_hop, hop, n_fft, out_n_fft)
    jobs = _check_jobs(n_jobs)

    real_dtype = np.float32 if X.dtype == np.complex64 else np.float64
    win = resolve_window(window, out_n_fft).astype(real_dtype)

    count = X.shape[1]
    length = output_length(count, out_hop)
    centers = np.arange(count) * out_hop
    logger.debug("istft: %d frames -> %d samples (out_n_fft=%d, out_hop=%d, demod=%s)",
                 count, length, out_n_fft, out_hop, demod)

    if demod:
        X = remodulate(X, hop)

    n_out_bins = out_n_fft // 2 + 1
    n_copy = min(X.shape[0], n_out_bins)

    def synthesize(block):
        spec = np.zeros((n_out_bins, block.stop - block.start), dtype=X.dtype)
        spec[:n_copy] = X[:n_copy, block]
        frames = np.fft.irfft(spec, n=out_n_fft, axis=0).astype(real_dtype, copy=False)
        frames *= win[:, np.newaxis]
        return overlap_add(np.zeros(length, dtype=real_dtype), frames, centers[block])

    out = np.zeros(length, dtype=real_dtype)
    for part in _map_frames(synthesize, count, jobs):
        out += part
    return out
