"""specbank: zero-phase short-time Fourier analysis and overlap-add resynthesis."""

import logging

__version__ = "0.1.0"

from .core import stft, istft, demodulate, remodulate, band
from .convert import (
    n_frames, output_length,
    frames_to_samples, samples_to_frames, frames_to_time,
    fft_frequencies, band_frequencies,
)
from .filters import (
    rect, hann, cosine, raised_cosine, hamming, gaussian,
    get_window, resolve_window, overlap_sum,
    ExplicitWindow, GeneratedWindow,
)
from .plan import STFTPlan
from .exceptions import ConfigurationError

logging.getLogger(__name__).addHandler(logging.NullHandler())
