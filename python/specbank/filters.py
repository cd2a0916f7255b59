"""Window functions and resolution of window arguments.

Every generator has the signature ``f(n, zerophase=True)``.  Windows are
periodic and sampled on the normalized offset ``t = offset / n`` from the
window center, ``t`` in ``[-0.5, 0.5)``.  With ``zerophase=True`` the
center sits at index 0 and negative offsets wrap to the tail of the array
(the layout the transforms expect); with ``zerophase=False`` the same
samples are centered at index ``n // 2``.
"""

import inspect
from dataclasses import dataclass

import numpy as np

from ._buffer import overlap_add, zero_phase_offsets
from .convert import output_length
from .exceptions import ConfigurationError


def _periodic(n, zerophase, shape):
    t = zero_phase_offsets(n) / float(n)
    win = np.asarray(shape(t), dtype=np.float64)
    if not zerophase:
        win = np.fft.fftshift(win)
    return win


# ---------------------------------------------------------------------------
# Window generators
# ---------------------------------------------------------------------------

def rect(n, zerophase=True):
    """Rectangular (boxcar) window: all ones."""
    return np.ones(n, dtype=np.float64)


def hann(n, zerophase=True):
    """Periodic Hann window, ``0.5 * (1 + cos(2 pi t))``.

    COLA with constant 1 at ``hop = n / 2``.
    """
    return _periodic(n, zerophase, lambda t: 0.5 * (1.0 + np.cos(2.0 * np.pi * t)))


def cosine(n, zerophase=True):
    """Cosine (square-root Hann) window, ``cos(pi t)``.

    Its square is :func:`hann`, so a cosine analysis window paired with a
    cosine synthesis window reconstructs with unit gain at ``hop = n / 2``.
    """
    return _periodic(n, zerophase, lambda t: np.cos(np.pi * t))


def raised_cosine(n, zerophase=True, alpha=0.5):
    """Generalized raised-cosine window, ``alpha + (1 - alpha) cos(2 pi t)``.

    Parameters
    ----------
    n : int
        Window length.
    zerophase : bool
        Center at index 0. Default: True.
    alpha : float
        Pedestal in ``[0, 1]``. 0.5 gives Hann, 0.54 Hamming. Default: 0.5.
    """
    if not 0.0 <= alpha <= 1.0:
        raise ConfigurationError(f"alpha must be in [0, 1], got {alpha}")
    return _periodic(n, zerophase,
                     lambda t: alpha + (1.0 - alpha) * np.cos(2.0 * np.pi * t))


def hamming(n, zerophase=True):
    """Periodic Hamming window (raised cosine with ``alpha=0.54``)."""
    return raised_cosine(n, zerophase=zerophase, alpha=0.54)


def gaussian(n, zerophase=True, sigma=0.2):
    """Gaussian window, ``exp(-0.5 (t / sigma)^2)``.

    ``sigma`` is relative to the window length.
    """
    if sigma <= 0:
        raise ConfigurationError(f"sigma must be positive, got {sigma}")
    return _periodic(n, zerophase, lambda t: np.exp(-0.5 * (t / sigma) ** 2))


_WINDOWS = {
    "rect": rect,
    "boxcar": rect,
    "rectangular": rect,
    "hann": hann,
    "hanning": hann,
    "cosine": cosine,
    "raised_cosine": raised_cosine,
    "hamming": hamming,
    "gaussian": gaussian,
}


def get_window(name, n, zerophase=True, **kwargs):
    """Build a window by name.

    Parameters
    ----------
    name : str
        One of ``'rect'`` (``'boxcar'``, ``'rectangular'``), ``'hann'``
        (``'hanning'``), ``'cosine'``, ``'raised_cosine'``, ``'hamming'``,
        ``'gaussian'``.
    n : int
        Window length.
    zerophase : bool
        Center at index 0. Default: True.
    **kwargs
        Shape parameters (``alpha``, ``sigma``) forwarded to the generator.

    Returns
    -------
    np.ndarray
        Window samples, shape ``(n,)``, float64.
    """
    return _lookup(name)(n, zerophase=zerophase, **kwargs)


def _lookup(name):
    try:
        return _WINDOWS[name.lower()]
    except (KeyError, AttributeError):
        raise ConfigurationError(
            f"Unknown window: {name!r}. Must be one of {sorted(_WINDOWS)}."
        ) from None


# ---------------------------------------------------------------------------
# Window arguments
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ExplicitWindow:
    """Window given as samples, already zero-phase aligned."""

    samples: object

    def resolve(self, n_fft):
        win = np.asarray(self.samples)
        if win.ndim != 1:
            raise ConfigurationError(f"window must be 1-D, got shape {win.shape}")
        if not np.isrealobj(win):
            raise ConfigurationError("window must be real-valued")
        if len(win) != n_fft:
            raise ConfigurationError(
                f"window length {len(win)} does not match transform size {n_fft}"
            )
        return win.astype(np.float64)


@dataclass(frozen=True)
class GeneratedWindow:
    """Window produced by calling ``function(n_fft, zerophase=zerophase)``."""

    function: object
    zerophase: bool = True

    def resolve(self, n_fft):
        return ExplicitWindow(self.function(n_fft, zerophase=self.zerophase)).resolve(n_fft)


def as_window(window):
    """Coerce a window argument into an ExplicitWindow or GeneratedWindow.

    Accepts an already-tagged window, ``None`` (rectangular), a window
    name, a ``(name, *params)`` tuple (params passed positionally after
    ``zerophase``, e.g. ``('gaussian', 0.1)`` gives sigma 0.1), a
    generator callable, or an array-like of samples.  A list whose first
    item is a name is read like the tuple, which is the form a tuple
    takes after a trip through JSON.

    Raises
    ------
    ConfigurationError
        For an unknown name, or params the named generator cannot take.
    """
    if isinstance(window, (ExplicitWindow, GeneratedWindow)):
        return window
    if window is None:
        return GeneratedWindow(rect)
    if isinstance(window, str):
        return GeneratedWindow(_lookup(window))
    if isinstance(window, (tuple, list)) and window and isinstance(window[0], str):
        generator, params = _lookup(window[0]), tuple(window[1:])
        try:
            inspect.signature(generator).bind(0, True, *params)
        except TypeError:
            raise ConfigurationError(
                f"Window {window[0]!r} does not take parameters {params}"
            ) from None
        return GeneratedWindow(
            lambda n, zerophase=True: generator(n, zerophase, *params)
        )
    if callable(window):
        return GeneratedWindow(window)
    return ExplicitWindow(window)


def resolve_window(window, n_fft):
    """Resolve any window argument to a length-``n_fft`` float64 array.

    Raises
    ------
    ConfigurationError
        If the argument cannot be interpreted as a window or its resolved
        length differs from ``n_fft``.
    """
    return as_window(window).resolve(n_fft)


def overlap_sum(window, hop_length, n_frames=None):
    """Sum hop-shifted copies of a zero-phase window.

    Useful for checking the constant-overlap-add property of a window
    (or of an analysis * synthesis window product) before relying on
    reconstruction; the transforms never check it themselves.

    Parameters
    ----------
    window : array-like
        Zero-phase window samples.
    hop_length : int
        Hop between copies.
    n_frames : int or None
        Number of copies. Default: enough that the middle of the result
        is fully overlapped, ``2 * ceil(n / hop_length) + 1``.

    Returns
    -------
    np.ndarray
        Overlap sum, shape ``((n_frames - 1) * hop_length + 1,)``.
        A COLA window gives a constant away from both ends.
    """
    if (not isinstance(hop_length, (int, np.integer)) or isinstance(hop_length, bool)
            or hop_length <= 0):
        raise ConfigurationError(f"hop_length must be a positive integer, got {hop_length!r}")
    win = np.asarray(window, dtype=np.float64)
    if win.ndim != 1:
        raise ConfigurationError(f"window must be 1-D, got shape {win.shape}")
    if n_frames is None:
        n_frames = 2 * (-(-len(win) // hop_length)) + 1
    out = np.zeros(output_length(n_frames, hop_length), dtype=np.float64)
    frames = np.repeat(win[:, np.newaxis], n_frames, axis=1)
    return overlap_add(out, frames, np.arange(n_frames) * hop_length)
