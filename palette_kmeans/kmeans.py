import numpy as np

from palette_kmeans.centroid import Centroid


def color_distance(colors, color):
    """
    Euclidean distance in RGB space between `colors` (shape (..., 3)) and a
    single (R, G, B) triple. No channel weighting.
    """
    diff = np.asarray(colors, dtype=np.int64) - np.asarray(color, dtype=np.int64)
    return np.sqrt(np.sum(diff * diff, axis=-1))


def init_centroids(n_clusters, rng):
    """
    Create `n_clusters` centroids, each seeded with an independent uniform
    RGB draw from the shared generator `rng`.
    """
    centroids = []
    for _ in range(n_clusters):
        c = Centroid()
        c.initialize_random(rng)
        centroids.append(c)
    return centroids


def _pixel_coords(height, width):
    # row-major (row, col) pairs, the scan order of an assignment pass
    return np.indices((height, width)).reshape(2, -1).T


def assign_pixels(pixels, centroids):
    """
    Nearest-centroid assignment over the whole buffer.

    Every centroid's membership is cleared, then each pixel is added to the
    centroid with the smallest distance. On exact ties the centroid that comes
    first in `centroids` wins (strict `<` improvement).

    Returns:
      labels : int array (height, width), index of the owning centroid
    """
    height, width = pixels.shape[:2]
    flat = pixels.reshape(-1, 3)

    for c in centroids:
        c.clear_members()

    best = np.full(flat.shape[0], np.inf)
    labels = np.full(flat.shape[0], -1, dtype=np.intp)
    for idx, c in enumerate(centroids):
        d = color_distance(flat, c.color)
        closer = d < best
        best[closer] = d[closer]
        labels[closer] = idx

    coords = _pixel_coords(height, width)
    for idx, c in enumerate(centroids):
        c.add_members(coords[labels == idx])

    return labels.reshape(height, width)


def is_pixel_assigned(labels, i, j):
    """O(1) lookup in the owner grid produced by `assign_pixels`."""
    return bool(labels[i, j] >= 0)


def relocate_centroid(pixels, centroid):
    """
    Move `centroid` to the truncated integer mean color of its members.
    A centroid without members keeps its color.

    Returns True if the centroid had members.
    """
    n = centroid.n_members
    if n == 0:
        return False

    members = centroid.members
    values = pixels[members[:, 0], members[:, 1]].astype(np.int64)
    sums = values.sum(axis=0)
    # truncating division, per channel
    means = np.sign(sums) * (np.abs(sums) // n)
    centroid.color = means
    return True


def relocate_centroids(pixels, centroids):
    """Relocate every centroid; returns the indices of the empty ones."""
    empty = []
    for idx, c in enumerate(centroids):
        if not relocate_centroid(pixels, c):
            empty.append(idx)
    return empty


def repaint(pixels, centroids):
    """
    Overwrite, in place, every member pixel with its centroid's color.
    Pixels owned by no centroid are left as they are.
    """
    for c in centroids:
        members = c.members
        if len(members) == 0:
            continue
        color = np.clip(np.array(c.color, dtype=np.int64), 0, 255)
        pixels[members[:, 0], members[:, 1]] = color
    return pixels


def compute_inertia(pixels, labels, palette):
    """
    Sum of squared RGB distances of each pixel to the color of its centroid.
    """
    flat = pixels.reshape(-1, 3).astype(np.int64)
    lbl = labels.reshape(-1)
    if flat.shape[0] == 0:
        return 0.0
    diff = flat - np.asarray(palette, dtype=np.int64)[lbl]
    return float(np.sum(diff * diff))
