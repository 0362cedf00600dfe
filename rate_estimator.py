"""
Turns cumulative network counters into rates normalized by a decaying ceiling.

Channel order everywhere: in_bytes, in_errors, out_bytes, out_errors, collisions.
"""

import logging
import time

from constants import NET_BOOTSTRAP_RATE, NET_DECAY_FACTOR

logger = logging.getLogger(__name__)

IN_BYTES, IN_ERRORS, OUT_BYTES, OUT_ERRORS, COLLISIONS = range(5)
NUM_CHANNELS = 5
UNSEEDED = -1

# Byte channels are reported in bits/s
_BIT_CHANNELS = (IN_BYTES, OUT_BYTES)


class RateSample:
    """Result of one applied update."""

    def __init__(self, rates, ceilings, bootstrap):
        self.rates = rates
        self.ceilings = ceilings
        self.bootstrap = bootstrap

    def normalized(self, channel):
        ceiling = self.ceilings[channel]
        if ceiling <= 0:
            return 0.0
        return self.rates[channel] / ceiling

    @property
    def in_bad(self):
        return self.ceilings[IN_ERRORS] > 0 or self.ceilings[COLLISIONS] > 0

    @property
    def out_bad(self):
        return self.ceilings[OUT_ERRORS] > 0 or self.ceilings[COLLISIONS] > 0


class RateEstimator:
    """
    Counter-delta rate with a peak-hold ceiling that relaxes by `decay_factor`
    every applied tick. At a 250ms tick and 0.9999 the ceiling remembers
    peaks for roughly the last two hours.
    """

    def __init__(self, decay_factor=NET_DECAY_FACTOR, bootstrap_rate=NET_BOOTSTRAP_RATE, clock=time.monotonic):
        self.decay_factor = decay_factor
        self.bootstrap_rate = bootstrap_rate
        self._clock = clock
        self.last_counters = [0.0] * NUM_CHANNELS
        self.last_timestamp = 0.0
        self.current_rate = [0.0] * NUM_CHANNELS
        self.decay_ceiling = [UNSEEDED] * NUM_CHANNELS

    def prime(self, counters, timestamp=None):
        """Record a baseline so the first update measures a real interval."""
        self.last_counters = [float(c) for c in counters]
        self.last_timestamp = self._clock() if timestamp is None else timestamp

    @property
    def seeded(self):
        return any(c != UNSEEDED for c in self.decay_ceiling)

    def update(self, counters, timestamp=None):
        """
        Feed a counter snapshot. Returns a RateSample, or None when the clock
        did not advance (state is left untouched in that case).
        """
        now = self._clock() if timestamp is None else timestamp
        delta_t = now - self.last_timestamp
        if delta_t <= 0:
            logger.debug("Skipping network sample, clock delta %.6f", delta_t)
            return None

        for i in range(NUM_CHANNELS):
            # Counters drop when an interface goes away; never report negative traffic.
            delta = max(0.0, counters[i] - self.last_counters[i])
            self.current_rate[i] = delta / delta_t
            self.last_counters[i] = float(counters[i])
        self.last_timestamp = now

        for i in _BIT_CHANNELS:
            self.current_rate[i] *= 8

        bootstrap = self._update_ceilings()
        return RateSample(list(self.current_rate), list(self.decay_ceiling), bootstrap)

    def _update_ceilings(self):
        first_run = True
        for i in range(NUM_CHANNELS):
            if self.decay_ceiling[i] != UNSEEDED:
                self.decay_ceiling[i] = max(
                    self.current_rate[i],
                    self.decay_factor * self.decay_ceiling[i],
                )
                first_run = False
            else:
                self.decay_ceiling[i] = self.current_rate[i]

        if first_run:
            # An observed 0 would make the first real packet read as 100%.
            self.decay_ceiling[IN_BYTES] = self.bootstrap_rate
            self.decay_ceiling[OUT_BYTES] = self.bootstrap_rate
        return first_run

