import logging

import numpy as np

from palette_kmeans.config import DEFAULT_MAX_ITER, MOVEMENT_THRESHOLD
from palette_kmeans.kmeans import color_distance

logger = logging.getLogger(__name__)

UNINITIALIZED = "uninitialized"
CONTINUE = "continue"
CONVERGED = "converged"


class ConvergenceTracker:
    """
    Decides whether the assign/relocate loop keeps going.

    Holds one (R, G, B) snapshot per centroid, by position, and the number of
    checks made so far. Each `check` compares the centroids with the snapshot,
    refreshes the snapshot and returns True while the loop should continue.
    The first check only records the snapshot. Once `iteration` reaches
    `max_iter` the answer is False whatever the movement.
    """

    def __init__(self, max_iter=DEFAULT_MAX_ITER, threshold=MOVEMENT_THRESHOLD):
        self.max_iter = max_iter
        self.threshold = threshold
        self.snapshot = []
        self.iteration = 0
        self.state = UNINITIALIZED
        self.capped = False
        self.last_shift = np.nan

    def check(self, centroids):
        if not self.snapshot:
            moved = True
            self.last_shift = np.nan
        else:
            shifts = [
                color_distance(c.color, prev)
                for c, prev in zip(centroids, self.snapshot)
            ]
            self.last_shift = float(max(shifts)) if shifts else 0.0
            moved = any(s > self.threshold for s in shifts)

        self.snapshot = [c.color for c in centroids]
        self.iteration += 1
        logger.debug(
            "check %d: max centroid shift %.3f", self.iteration, self.last_shift
        )

        if self.iteration >= self.max_iter:
            self.capped = moved
            self.state = CONVERGED
            return False

        self.state = CONTINUE if moved else CONVERGED
        return moved
