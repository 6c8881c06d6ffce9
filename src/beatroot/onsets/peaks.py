"""Peak picking over a 1-D onset detection function."""

import numpy as np

# Context for the relative threshold, in multiples of the peak width
PRE = 3
POST = 1


def normalise(data):
    """Z-score normalisation; a constant signal maps to all zeros.

    Parameters
    ----------
    data : array-like
        Input signal.
    """
    x = np.asarray(data, dtype=np.float64)
    if x.size == 0:
        return x.copy()
    mean = np.mean(x)
    sd = np.std(x)
    if sd == 0:
        sd = 1.0
    return (x - mean) / sd


def exp_decay_with_hold(av, decay_rate, data, start, stop):
    """Run the decaying average with hold over data[start:stop] and return it.

    The average decays towards each sample but jumps up immediately when a
    sample exceeds it.
    """
    for value in data[start:stop]:
        av = decay_rate * av + (1 - decay_rate) * value
        if av < value:
            av = value
    return av


def over_threshold(data, index, width, threshold, is_relative, av):
    """Return True if data[index] clears the adaptive and fixed/relative thresholds.

    Parameters
    ----------
    data : np.ndarray
        Signal.
    index : int
        Candidate peak index.
    width : int
        Peak half-width in samples; sets the context for relative mode.
    threshold : float
        Absolute threshold, or margin above the local mean if `is_relative`.
    is_relative : bool
        Compare against the mean over [index - PRE*width, index + POST*width).
    av : float
        Current decaying average; the peak must not fall below it.
    """
    if data[index] < av:
        return False
    if is_relative:
        i_start = max(0, index - PRE * width)
        i_stop = min(len(data), index + POST * width)
        if i_stop <= i_start:
            return False
        return bool(data[index] > np.mean(data[i_start:i_stop]) + threshold)
    return bool(data[index] > threshold)


def find_peaks(data, width, threshold, decay_rate=0.9, is_relative=True):
    """Return indices of local maxima that pass the adaptive threshold.

    A sample is a local maximum when it is the first occurrence of the
    largest value in the window [i - width, i + width].

    Parameters
    ----------
    data : array-like
        Onset detection function.
    width : int
        Minimum spacing between peaks, in samples.
    threshold : float
        See `over_threshold`.
    decay_rate : float
        Decay of the held average (0 disables the adaptive part).
    is_relative : bool
        Threshold relative to the local mean instead of absolute.
    """
    x = np.asarray(data, dtype=np.float64)
    n = len(x)
    peaks = []
    if n == 0:
        return peaks
    av = x[0]
    for mid in range(n):
        av = exp_decay_with_hold(av, decay_rate, x, mid, mid + 1)
        lo = max(0, mid - width)
        hi = min(n, mid + width + 1)
        if lo + int(np.argmax(x[lo:hi])) == mid and over_threshold(x, mid, width, threshold, is_relative, av):
            peaks.append(mid)
    return peaks
