import logging

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans

from palette_kmeans.centroid import Centroid
from palette_kmeans.config import (
    DEFAULT_MAX_ITER,
    DEFAULT_N_CLUSTERS,
    MOVEMENT_THRESHOLD,
)
from palette_kmeans.convergence import ConvergenceTracker
from palette_kmeans.kmeans import (
    assign_pixels,
    color_distance,
    compute_inertia,
    init_centroids,
    relocate_centroids,
    repaint,
)
from palette_kmeans.metrics import compute_all_metrics

logger = logging.getLogger(__name__)


class BaseQuantizer:
    def __init__(self, n_clusters=DEFAULT_N_CLUSTERS, random_state=None, **kwargs):
        if n_clusters is None or n_clusters < 1:
            raise ValueError(f"n_clusters must be >= 1, got {n_clusters!r}")
        self.n_clusters = n_clusters
        self.random_state = random_state
        self.model = None

    def _validate_input(self, X):
        """
        Return X as an (height, width, 3) integer array. An (n, 3) array or
        DataFrame is treated as a single column of n pixels.
        """
        if isinstance(X, pd.DataFrame):
            X = X.values
        elif not isinstance(X, np.ndarray):
            raise ValueError("Input must be numpy array or pandas DataFrame")

        if X.ndim == 2 and X.shape[1] == 3:
            X = X.reshape(X.shape[0], 1, 3)
        if X.ndim != 3 or X.shape[2] != 3:
            raise ValueError(
                f"Expected a (height, width, 3) pixel buffer, got shape {X.shape}"
            )
        if not np.issubdtype(X.dtype, np.integer):
            raise ValueError(
                f"Pixel buffer must hold integer channel values, got dtype {X.dtype}"
            )
        return X

    def _check_fitted(self):
        if not hasattr(self, "labels_"):
            raise RuntimeError(f"{type(self).__name__} is not fitted yet; call fit() first")

    def _fit_buffer(self, pixels):
        raise NotImplementedError

    def fit(self, X):
        pixels = self._validate_input(X)
        self._fit_buffer(pixels)
        self.X_ = pixels.copy()
        self.palette_ = np.array([c.color for c in self.centroids_], dtype=np.int64)
        self.inertia_ = compute_inertia(self.X_, self.labels_, self.palette_)
        return self

    def quantize(self, X):
        """
        Fit on X and repaint it in place with the palette. Returns the
        repainted buffer: the caller's array for numpy input, the caller's
        DataFrame (rows rewritten through .loc) for DataFrame input.
        """
        if isinstance(X, pd.DataFrame):
            # DataFrame.values may be a read-only or detached view
            pixels = self._validate_input(np.array(X.values))
            self.fit(pixels)
            repainted = repaint(pixels, self.centroids_)
            X.loc[:, :] = repainted.reshape(-1, 3)
            return X

        pixels = self._validate_input(X)
        self.fit(pixels)
        return repaint(pixels, self.centroids_)

    def get_palette(self):
        self._check_fitted()
        return self.palette_

    def get_labels(self):
        self._check_fitted()
        return self.labels_

    def get_real_palette(self):
        """
        Map each palette color to the nearest color actually present in the
        fitted buffer. Returns array of shape (n_clusters, 3).
        """
        self._check_fitted()
        flat = self.X_.reshape(-1, 3)
        if flat.shape[0] == 0:
            return np.empty((0, 3), dtype=self.X_.dtype)
        real = []
        for color in self.palette_:
            dists = color_distance(flat, color)
            real.append(flat[np.argmin(dists)])
        return np.vstack(real)

    def get_metrics(self):
        self._check_fitted()
        return compute_all_metrics(
            self.X_, self.labels_, self.palette_, random_state=self.random_state
        )


class ClusteringRun:
    """
    State of one clustering run: the centroids, the generator that seeded
    them, the convergence tracker and the latest owner grid. A new run is
    created for every fit, so estimators share nothing between runs.
    """

    def __init__(self, n_clusters, max_iter, threshold, random_state=None, init=None):
        self.rng = np.random.RandomState(random_state)
        if init is None:
            self.centroids = init_centroids(n_clusters, self.rng)
        else:
            self.centroids = [Centroid(*color) for color in init]
        self.tracker = ConvergenceTracker(max_iter=max_iter, threshold=threshold)
        self.labels = None
        self.empty = []

    def step(self, pixels):
        self.labels = assign_pixels(pixels, self.centroids)
        self.empty = relocate_centroids(pixels, self.centroids)
        return self.tracker.check(self.centroids)

    def run(self, pixels):
        while self.step(pixels):
            pass
        return self


class KMeansQuantizer(BaseQuantizer):
    """
    Palette reduction by k-means in RGB space.

    Centroids start at uniform random colors, then every iteration assigns
    each pixel to its nearest centroid, moves each centroid to the truncated
    mean of its members and checks whether any centroid moved more than
    `threshold`. Empty clusters keep their color. The loop ends on
    convergence or after `max_iter` checks.

    `init` optionally fixes the starting colors as an (n_clusters, 3) array;
    by default they are drawn from a RandomState seeded with `random_state`.
    Because empty clusters are never reseeded, a random start can leave a
    centroid empty and another one sitting between two color groups; the
    result depends on the seed, and only a fixed `init` makes it exact.
    """

    def __init__(
        self,
        n_clusters=DEFAULT_N_CLUSTERS,
        max_iter=DEFAULT_MAX_ITER,
        threshold=MOVEMENT_THRESHOLD,
        random_state=None,
        init=None,
    ):
        super().__init__(n_clusters=n_clusters, random_state=random_state)
        if init is not None:
            init = np.asarray(init, dtype=np.int64)
            if init.shape != (n_clusters, 3):
                raise ValueError(
                    f"init must have shape ({n_clusters}, 3), got {init.shape}"
                )
        if max_iter is None or max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {max_iter!r}")
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold!r}")
        self.max_iter = max_iter
        self.threshold = threshold
        self.init = init

    def _fit_buffer(self, pixels):
        height, width = pixels.shape[:2]
        logger.info(
            "k-means: %d clusters over %dx%d pixels (seed=%s)",
            self.n_clusters, width, height, self.random_state,
        )
        run = ClusteringRun(
            self.n_clusters, self.max_iter, self.threshold, self.random_state,
            init=self.init,
        )
        run.run(pixels)

        self.run_ = run
        self.centroids_ = run.centroids
        self.labels_ = run.labels
        self.n_iter_ = run.tracker.iteration
        self.converged_ = not run.tracker.capped
        self.empty_clusters_ = list(run.empty)
        logger.info(
            "k-means finished after %d iterations (converged=%s, empty clusters=%d)",
            self.n_iter_, self.converged_, len(self.empty_clusters_),
        )


def _centroids_from_labels(pixels, labels, centers):
    """
    Build Centroid objects whose members follow `labels` and whose color is
    the truncated integer mean of those members (or the truncated center
    when a cluster is empty).
    """
    height, width = pixels.shape[:2]
    coords = np.indices((height, width)).reshape(2, -1).T
    flat_labels = labels.reshape(-1)
    flat = pixels.reshape(-1, 3).astype(np.int64)

    centroids = []
    for idx, center in enumerate(centers):
        mask = flat_labels == idx
        n = int(mask.sum())
        if n:
            color = flat[mask].sum(axis=0) // n
        else:
            color = np.trunc(center)
        c = Centroid(*color)
        c.add_members(coords[mask])
        centroids.append(c)
    return centroids


class SklearnKMeansQuantizer(BaseQuantizer):
    """
    Baseline using scikit-learn's KMeans, with the same interface.
    Unlike KMeansQuantizer it cannot leave clusters empty, so fitting fewer
    pixels than n_clusters raises ValueError.
    """

    def __init__(
        self,
        n_clusters=DEFAULT_N_CLUSTERS,
        max_iter=DEFAULT_MAX_ITER,
        random_state=None,
        **kwargs
    ):
        super().__init__(n_clusters=n_clusters, random_state=random_state)
        self.max_iter = max_iter
        self.model = KMeans(
            n_clusters=n_clusters,
            max_iter=max_iter,
            random_state=random_state,
            **kwargs
        )

    def _fit_buffer(self, pixels):
        height, width = pixels.shape[:2]
        flat = pixels.reshape(-1, 3).astype(float)
        if flat.shape[0] < self.n_clusters:
            # KMeansQuantizer would leave the extra clusters empty instead
            raise ValueError(
                f"scikit-learn KMeans needs at least n_clusters={self.n_clusters} "
                f"pixels, got {flat.shape[0]}"
            )
        self.model.fit(flat)

        self.labels_ = self.model.labels_.reshape(height, width)
        self.centroids_ = _centroids_from_labels(
            pixels, self.labels_, self.model.cluster_centers_
        )
        self.n_iter_ = int(self.model.n_iter_)
        self.converged_ = self.n_iter_ < self.max_iter
        self.empty_clusters_ = [
            i for i, c in enumerate(self.centroids_) if c.n_members == 0
        ]


def reduce_colors(
    pixels,
    n_clusters=DEFAULT_N_CLUSTERS,
    max_iter=DEFAULT_MAX_ITER,
    threshold=MOVEMENT_THRESHOLD,
    random_state=None,
):
    """
    Repaint `pixels` in place with at most `n_clusters` colors.
    Returns the fitted KMeansQuantizer.
    """
    quantizer = KMeansQuantizer(
        n_clusters=n_clusters,
        max_iter=max_iter,
        threshold=threshold,
        random_state=random_state,
    )
    quantizer.quantize(pixels)
    return quantizer
