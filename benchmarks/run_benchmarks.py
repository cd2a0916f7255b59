#!/usr/bin/env python3
"""specbank benchmarks: thread scaling, precision and reconstruction error.

Each row times one STFTPlan round trip (or one direction of it) and, where
it makes sense, reports the worst reconstruction error next to the time.
librosa is timed on the same signals when it is installed.
"""

import argparse
import json
import os
import platform
import time

import numpy as np

import specbank as sb

SR = 44100
N_FFT = 2048


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_signal(duration_s, dtype=np.float64, seed=0):
    """Noisy 440 Hz tone, so every band carries energy."""
    rng = np.random.default_rng(seed)
    t = np.arange(int(SR * duration_s)) / SR
    y = 0.5 * np.sin(2 * np.pi * 440 * t) + 0.05 * rng.standard_normal(len(t))
    return y.astype(dtype)


def best_of(fn, iterations, warmup):
    """Return (best ms, last result) over ``iterations`` timed calls."""
    for _ in range(warmup):
        fn()
    best, result = float("inf"), None
    for _ in range(iterations):
        start = time.perf_counter()
        result = fn()
        best = min(best, (time.perf_counter() - start) * 1000)
    return round(best, 3), result


def max_error(y, out, gain=1.0):
    return float(np.max(np.abs(out[:len(y)] / gain - y)))


# ---------------------------------------------------------------------------
# Suites
# ---------------------------------------------------------------------------

def thread_scaling(y, iterations, warmup):
    """stft and istft wall time as n_jobs grows."""
    rows = []
    jobs = sorted({1, 2, 4, os.cpu_count() or 1})
    base = sb.STFTPlan(N_FFT, N_FFT // 4, window="hann")
    X = base.stft(y)
    for n_jobs in jobs:
        plan = sb.STFTPlan(N_FFT, N_FFT // 4, window="hann", n_jobs=n_jobs)
        fwd, _ = best_of(lambda: plan.stft(y), iterations, warmup)
        inv, _ = best_of(lambda: plan.istft(X), iterations, warmup)
        rows.append({"suite": "threads", "case": f"n_jobs={n_jobs}",
                     "stft_ms": fwd, "istft_ms": inv})
    return rows


def precision(duration_s, iterations, warmup):
    """Round trip time and error for float32 and float64 signals."""
    rows = []
    plan = sb.STFTPlan(N_FFT, N_FFT // 2, window="hann", synthesis_window="rect")
    for dtype in (np.float32, np.float64):
        y = make_signal(duration_s, dtype)
        ms, out = best_of(lambda: plan.round_trip(y), iterations, warmup)
        rows.append({"suite": "precision", "case": np.dtype(dtype).name,
                     "round_trip_ms": ms, "max_error": max_error(y, out)})
    return rows


# (label, plan kwargs, COLA gain of analysis * synthesis)
WINDOW_CASES = [
    ("rect/rect hop N", dict(hop_length=N_FFT, window="rect"), 1.0),
    ("hann/rect hop N/2", dict(window="hann", synthesis_window="rect"), 1.0),
    ("hann/rect hop N/4", dict(hop_length=N_FFT // 4, window="hann",
                               synthesis_window="rect"), 2.0),
    ("cosine/cosine hop N/2", dict(window="cosine"), 1.0),
    ("hann demod hop N/2", dict(window="hann", synthesis_window="rect", demod=True), 1.0),
]


def windows(y, iterations, warmup):
    """Round trip time and error for COLA window pairs."""
    rows = []
    for label, kwargs, gain in WINDOW_CASES:
        plan = sb.STFTPlan(N_FFT, **kwargs)
        ms, out = best_of(lambda: plan.round_trip(y), iterations, warmup)
        rows.append({"suite": "windows", "case": label,
                     "round_trip_ms": ms, "max_error": max_error(y, out, gain)})
    return rows


def librosa_reference(y, iterations, warmup):
    """Time librosa on the same signal and report the spectral deviation."""
    try:
        import librosa
    except ImportError:
        print("librosa not available -- skipping reference timings.")
        return []
    hop = N_FFT // 4
    ms_lr, X_lr = best_of(
        lambda: librosa.stft(y, n_fft=N_FFT, hop_length=hop, pad_mode="constant"),
        iterations, warmup)
    ms_sb, X_sb = best_of(lambda: sb.stft(y, N_FFT, hop, window="hann"), iterations, warmup)
    sign = (-1.0) ** np.arange(X_sb.shape[0])[:, np.newaxis]
    n = min(X_sb.shape[1], X_lr.shape[1])
    deviation = float(np.max(np.abs(X_sb[:, :n] - sign * X_lr[:, :n])))
    return [{"suite": "librosa", "case": f"librosa {librosa.__version__}",
             "stft_ms": ms_lr, "specbank_stft_ms": ms_sb, "max_deviation": deviation}]


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def print_rows(rows):
    for row in rows:
        values = ", ".join(f"{k}={v:.3g}" for k, v in row.items()
                           if k not in ("suite", "case"))
        print(f"  {row['suite']:9s} | {row['case']:24s} | {values}")


def main():
    parser = argparse.ArgumentParser(description="specbank benchmarks")
    parser.add_argument("--duration", type=float, default=10.0,
                        help="Signal length in seconds (default: 10)")
    parser.add_argument("--iterations", type=int, default=5,
                        help="Timed iterations per case, best is kept (default: 5)")
    parser.add_argument("--warmup", type=int, default=1,
                        help="Untimed iterations per case (default: 1)")
    parser.add_argument("--json", metavar="PATH",
                        help="Also write the rows to a JSON report")
    args = parser.parse_args()

    y = make_signal(args.duration)
    print(f"specbank {sb.__version__}, numpy {np.__version__}, "
          f"{len(y)} samples, n_fft={N_FFT}")

    rows = []
    for suite in (thread_scaling, windows, librosa_reference):
        rows.extend(suite(y, args.iterations, args.warmup))
    rows.extend(precision(args.duration, args.iterations, args.warmup))
    print_rows(rows)

    if args.json:
        report = {
            "machine": platform.machine(),
            "cpu_count": os.cpu_count(),
            "python_version": platform.python_version(),
            "numpy_version": np.__version__,
            "specbank_version": sb.__version__,
            "duration_s": args.duration,
            "rows": rows,
        }
        with open(args.json, "w") as f:
            json.dump(report, f, indent=2)
        print(f"Report written to {args.json}")


if __name__ == "__main__":
    main()
