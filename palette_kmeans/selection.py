import matplotlib.pyplot as plt
import numpy as np
from kneed import KneeLocator

from palette_kmeans.quantizer import KMeansQuantizer


def find_elbow_k(
    df,
    metric="inertia",
    x_col="n_clusters",
    curve="convex",
    direction="decreasing"
) -> int:
    """
    Runs KneeLocator on df[x_col] vs df[metric] and returns the integer k.
    Falls back to the smallest k with the minimal metric value when the
    curve has no knee.
    """
    for col in (x_col, metric):
        if col not in df.columns:
            raise ValueError(f"Metrics frame has no column {col!r}")

    ks = df[x_col].to_numpy(dtype=float)
    ys = df[metric].to_numpy(dtype=float)
    knee = None
    if len(ks) >= 3:
        knee = KneeLocator(ks, ys, curve=curve, direction=direction).knee
    if knee is None:
        knee = ks[np.nanargmin(ys)]
    return int(knee)


def plot_elbow(X, k_range=range(1, 11), quantizer_cls=KMeansQuantizer, **q_kwargs):
    """
    Elbow plot of inertia vs. k, with the detected knee marked.
    """
    inertias = []
    for k in k_range:
        q = quantizer_cls(n_clusters=k, **q_kwargs)
        q.fit(X)
        inertias.append(q.inertia_)

    ks = list(k_range)
    fig, ax = plt.subplots()
    ax.plot(ks, inertias, "bx-")
    if len(ks) >= 3:
        knee = KneeLocator(ks, inertias, curve="convex", direction="decreasing").knee
        if knee is not None:
            ax.axvline(knee, color="red", linestyle="--", label=f"Elbow k={int(knee)}")
            ax.legend()
    ax.set_xlabel("Number of colors (k)")
    ax.set_ylabel("Inertia")
    ax.set_title("Elbow Method for Palette Size")
    return fig
