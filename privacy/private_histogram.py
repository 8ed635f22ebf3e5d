import logging
import math
from typing import Optional

import numpy as np

from errors.errors import InvalidArgumentError
from privacy.dyadic_buckets import DyadicHistogramBuckets
from sketch.histogram import Histogram

logger = logging.getLogger(__name__)


def noise_scale(epsilon: float, leaves: float) -> float:
    if not epsilon > 0:
        raise InvalidArgumentError(f"epsilon must be positive, got {epsilon}")
    if not leaves >= 1:
        raise InvalidArgumentError(f"Need at least one leaf, got {leaves}")
    # a single leaf is a one-level tree
    levels = math.log2(leaves) if leaves > 1 else 1.0
    return levels / epsilon


class PrivateHistogram:
    """Histogram released through the binary mechanism; exact counts are dropped once noised."""
    def __init__(self, histogram: Histogram, buckets: DyadicHistogramBuckets) -> None:
        if histogram.bucket_count != buckets.bucket_count:
            raise InvalidArgumentError(
                f"Histogram with {histogram.bucket_count} buckets for {buckets.bucket_count} dyadic buckets")
        self.buckets = buckets
        self._exact: Optional[tuple[np.ndarray, int, int]] = (
            histogram.counts.astype(np.float64), histogram.missing_count, histogram.out_of_range)
        self.counts = np.zeros(histogram.bucket_count)
        self.missing_count = 0.0
        self.out_of_range = 0.0
        self.variances = np.zeros(histogram.bucket_count)
        self.scale = 0.0

    def add_dyadic_laplace_noise(self, scale: float, seed: Optional[int] = None) -> "PrivateHistogram":
        if scale < 0:
            raise InvalidArgumentError(f"Noise scale must be >= 0, got {scale}")
        if self._exact is None:
            raise InvalidArgumentError("Noise was already added to this histogram")
        counts, missing_count, out_of_range = self._exact
        rng = np.random.default_rng() if seed is None else None
        variances = np.zeros(len(counts))
        for bucket in range(len(counts)):
            intervals = self.buckets.decompose(bucket)
            counts[bucket] += sum(self._node_noise(scale, level, index, seed, rng) for level, index in intervals)
            variances[bucket] = 2 * scale * scale * len(intervals)
        self.counts = counts
        self.variances = variances
        # missing and out-of-range rows sit outside the leaf tree, one draw each
        self.missing_count = missing_count + self._node_noise(scale, -1, 0, seed, rng)
        self.out_of_range = out_of_range + self._node_noise(scale, -1, 1, seed, rng)
        self.scale = scale
        self._exact = None
        logger.debug(f"added dyadic laplace noise of scale {scale} to {len(counts)} buckets")
        return self

    @staticmethod
    def _node_noise(scale: float, level: int, index: int, seed: Optional[int],
                    rng: Optional[np.random.Generator]) -> float:
        if scale == 0:
            return 0.0
        if rng is None:
            rng = np.random.default_rng([seed, level + 1, index])
        return float(rng.laplace(0.0, scale))

    def confidence(self, bucket: int) -> float:
        return 2 * math.sqrt(self.variances[bucket])

    def get_count(self, bucket: int) -> float:
        return float(self.counts[bucket])

    @property
    def bucket_count(self) -> int:
        return len(self.counts)

    def __repr__(self) -> str:
        return f"PrivateHistogram({np.round(self.counts, 2).tolist()}, scale={self.scale})"
