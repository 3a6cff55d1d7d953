import numpy as np
from sklearn.metrics import (
    silhouette_score,
    calinski_harabasz_score,
    davies_bouldin_score,
)

from palette_kmeans.config import SILHOUETTE_SAMPLE_SIZE


def _flatten(X, labels):
    return (
        np.asarray(X).reshape(-1, 3).astype(float),
        np.asarray(labels).reshape(-1),
    )


def _scorable(labels):
    # sklearn needs 2 <= n_labels <= n_samples - 1
    n_labels = len(np.unique(labels))
    return 1 < n_labels < len(labels)


def compute_silhouette(X, labels, sample_size=SILHOUETTE_SAMPLE_SIZE, random_state=None):
    """
    Mean silhouette coefficient, on a seeded random sample of at most
    `sample_size` pixels. NaN when fewer than 2 clusters are populated.
    """
    X, labels = _flatten(X, labels)
    if sample_size is not None and len(labels) > sample_size:
        rng = np.random.RandomState(random_state)
        idx = rng.choice(len(labels), sample_size, replace=False)
        X, labels = X[idx], labels[idx]
    if _scorable(labels):
        return float(silhouette_score(X, labels))
    return np.nan


def compute_calinski_harabasz(X, labels):
    X, labels = _flatten(X, labels)
    if _scorable(labels):
        return float(calinski_harabasz_score(X, labels))
    return np.nan


def compute_davies_bouldin(X, labels):
    X, labels = _flatten(X, labels)
    if _scorable(labels):
        return float(davies_bouldin_score(X, labels))
    return np.nan


def cluster_population_distribution(labels, n_clusters):
    """Dict {cluster: pixel count}, with 0 for empty clusters."""
    counts = np.bincount(np.asarray(labels).reshape(-1), minlength=n_clusters)
    return {idx: int(counts[idx]) for idx in range(n_clusters)}


def average_distance_to_centroids(X, labels, palette):
    X, labels = _flatten(X, labels)
    distances = {}
    for idx, color in enumerate(palette):
        pts = X[labels == idx]
        if len(pts) > 0:
            distances[idx] = float(np.mean(np.linalg.norm(pts - color, axis=1)))
        else:
            distances[idx] = np.nan
    return distances


def compute_wcss_per_cluster(X, labels, palette):
    """
    Returns dict {cluster: within-cluster sum of squares}.
    """
    X, labels = _flatten(X, labels)
    wcss = {}
    for idx, color in enumerate(palette):
        pts = X[labels == idx]
        wcss[idx] = float(np.sum((pts - color) ** 2)) if len(pts) else 0.0
    return wcss


def compute_unbalanced_factor(labels):
    """
    Ratio of largest cluster size to smallest non-empty cluster size.
    """
    labels = np.asarray(labels).reshape(-1)
    _, counts = np.unique(labels[labels >= 0], return_counts=True)
    if len(counts) < 2:
        return float("nan")
    return float(counts.max() / counts.min())


def reconstruct(labels, palette):
    """Quantized image implied by `labels` and `palette`, shape labels.shape + (3,)."""
    palette = np.asarray(palette, dtype=np.int64)
    return np.clip(palette[np.asarray(labels)], 0, 255)


def compute_mse(original, quantized):
    """Mean squared error per channel value between two buffers."""
    original = np.asarray(original, dtype=float)
    quantized = np.asarray(quantized, dtype=float)
    if original.size == 0:
        return np.nan
    return float(np.mean((original - quantized) ** 2))


def compute_psnr(original, quantized, max_value=255.0):
    """
    Peak signal-to-noise ratio in dB; inf for an exact reconstruction.
    """
    mse = compute_mse(original, quantized)
    if np.isnan(mse):
        return np.nan
    if mse == 0:
        return float("inf")
    return float(10.0 * np.log10(max_value ** 2 / mse))


def count_colors(pixels):
    """Number of distinct RGB triples in a buffer."""
    flat = np.asarray(pixels).reshape(-1, 3)
    if flat.shape[0] == 0:
        return 0
    return int(len(np.unique(flat, axis=0)))


def compute_all_metrics(X, labels, palette, random_state=None):
    quantized = reconstruct(labels, palette)
    return {
        "silhouette": compute_silhouette(X, labels, random_state=random_state),
        "calinski_harabasz": compute_calinski_harabasz(X, labels),
        "davies_bouldin": compute_davies_bouldin(X, labels),
        "population": cluster_population_distribution(labels, len(palette)),
        "avg_distance": average_distance_to_centroids(X, labels, palette),
        "wcss": compute_wcss_per_cluster(X, labels, palette),
        "unbalanced_factor": compute_unbalanced_factor(labels),
        "mse": compute_mse(X, quantized),
        "psnr": compute_psnr(X, quantized),
    }
