"""Zero-phase circular placement of frames in FFT buffers.

A length-``n_fft`` buffer holds the frame center at index 0.  Index ``i``
carries logical offset ``i`` for ``i < n_fft // 2`` and ``i - n_fft``
otherwise, so the negative half of the frame wraps to the tail.  Window
generation, analysis and synthesis all go through this one mapping.
"""

import numpy as np


def zero_phase_offsets(n_fft):
    """Return the offset from the frame center held at each buffer index."""
    half = n_fft // 2
    return (np.arange(n_fft) + half) % n_fft - half


def frame_positions(centers, n_fft):
    """Signal index for each (buffer index, frame), shape ``(n_fft, n_frames)``."""
    centers = np.asarray(centers, dtype=np.intp)
    return zero_phase_offsets(n_fft)[:, np.newaxis] + centers[np.newaxis, :]


def gather_frames(y, centers, n_fft):
    """Copy the frames of ``y`` around ``centers`` into zero-phase buffers.

    Positions outside ``[0, len(y))`` are zero-filled.

    Returns
    -------
    np.ndarray
        Frames, shape ``(n_fft, len(centers))``, same dtype as ``y``.
    """
    pos = frame_positions(centers, n_fft)
    valid = (pos >= 0) & (pos < len(y))
    frames = np.zeros(pos.shape, dtype=y.dtype)
    frames[valid] = y[pos[valid]]
    return frames


def overlap_add(out, frames, centers):
    """Add zero-phase ``frames`` into ``out`` around ``centers`` in place.

    Overlapping contributions are summed (``np.add.at``), never
    overwritten.  Positions falling outside ``out`` are dropped.
    """
    pos = frame_positions(centers, frames.shape[0])
    valid = (pos >= 0) & (pos < len(out))
    np.add.at(out, pos[valid], frames[valid])
    return out
