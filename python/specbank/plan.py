"""Bundled STFT parameters shared by analysis and resynthesis."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields

from . import convert
from .core import _check_hop, _check_jobs, _check_n_fft, _resolve_out_hop, istft, stft
from .exceptions import ConfigurationError
from .filters import as_window


@dataclass(frozen=True, eq=False)
class STFTPlan:
    """STFT configuration applied identically in both directions.

    Everything except the window shapes is validated on construction, so
    a plan that exists can always run.  Windows may be anything
    :func:`specbank.stft` accepts; names and ``(name, *params)`` tuples
    are looked up eagerly.

    Parameters
    ----------
    n_fft : int
        FFT size (positive, even).
    hop_length : int or None
        Analysis hop. Default: ``n_fft // 2``.
    window : object
        Analysis window. Default: ``'rect'``.
    synthesis_window : object
        Synthesis window. Default: same as ``window``.
    demod : bool
        Demodulate bands on analysis and remodulate on resynthesis.
    out_n_fft : int or None
        Resynthesis FFT size. Default: ``n_fft``.
    out_hop : int or None
        Resynthesis hop. Default: ``out_n_fft * hop / n_fft``.
    n_jobs : int or None
        Worker threads for both directions. Default: 1.
    """

    n_fft: int
    hop_length: int | None = None
    window: object = "rect"
    synthesis_window: object = None
    demod: bool = False
    out_n_fft: int | None = None
    out_hop: int | None = None
    n_jobs: int | None = 1

    def __post_init__(self):
        _check_n_fft(self.n_fft)
        _check_hop(self.hop)
        _check_n_fft(self.resynthesis_n_fft, "out_n_fft")
        if self.out_hop is None:
            _resolve_out_hop(None, self.hop, self.n_fft, self.resynthesis_n_fft)
        else:
            _check_hop(self.out_hop, "out_hop")
        _check_jobs(self.n_jobs)
        as_window(self.window)
        as_window(self.synthesis_window if self.synthesis_window is not None else self.window)

    @classmethod
    def from_dict(cls, config):
        """Build a plan from a plain mapping (e.g. parsed JSON or TOML).

        ``[name, *params]`` window lists are read back as tuples.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ConfigurationError(f"Unknown STFTPlan settings: {unknown}")
        if "n_fft" not in config:
            raise ConfigurationError("STFTPlan settings must include n_fft")
        config = dict(config)
        for key in ("window", "synthesis_window"):
            value = config.get(key)
            if isinstance(value, list) and value and isinstance(value[0], str):
                config[key] = tuple(value)
        return cls(**config)

    def to_dict(self):
        """Plain-mapping form of the plan, inverse of :meth:`from_dict`.

        Plans compare by identity, so compare their ``to_dict()`` forms
        when windows are given by name.
        """
        return asdict(self)

    @property
    def hop(self):
        """Resolved analysis hop."""
        return self.n_fft // 2 if self.hop_length is None else self.hop_length

    @property
    def resynthesis_n_fft(self):
        return self.n_fft if self.out_n_fft is None else self.out_n_fft

    @property
    def n_bins(self):
        """Rows in the spectrum: ``n_fft // 2 + 1``."""
        return self.n_fft // 2 + 1

    def n_frames(self, n_samples):
        """Frames produced by :meth:`stft` for a signal of ``n_samples``."""
        return convert.n_frames(n_samples, self.hop)

    def output_length(self, n_frames):
        """Samples produced by :meth:`istft` for ``n_frames`` frames."""
        out_hop = self.out_hop
        if out_hop is None:
            out_hop = _resolve_out_hop(None, self.hop, self.n_fft, self.resynthesis_n_fft)
        return convert.output_length(n_frames, out_hop)

    def stft(self, y):
        """Analyze ``y`` with this plan."""
        return stft(y, n_fft=self.n_fft, hop_length=self.hop, window=self.window,
                    demod=self.demod, n_jobs=self.n_jobs)

    def istft(self, X):
        """Resynthesize ``X`` with this plan."""
        window = self.window if self.synthesis_window is None else self.synthesis_window
        return istft(X, n_fft=self.n_fft, hop_length=self.hop,
                     out_n_fft=self.out_n_fft, out_hop=self.out_hop,
                     window=window, demod=self.demod, n_jobs=self.n_jobs)

    def round_trip(self, y):
        """``istft(stft(y))`` under this plan."""
        return self.istft(self.stft(y))
