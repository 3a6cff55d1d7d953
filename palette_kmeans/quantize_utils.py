# quantize_utils.py
import inspect
import logging

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from palette_kmeans.plotter import plot_metrics_over_k, plot_palette
from palette_kmeans.selection import find_elbow_k

logger = logging.getLogger(__name__)


def _make_quantizer(quantizer_cls, *, n_clusters=None, random_state=None, **extra_kwargs):
    """
    Instantiate a quantizer, passing only the kwargs its __init__ accepts.

    n_clusters and random_state are injected when accepted; anything else in
    extra_kwargs is dropped unless it appears in the signature (threshold
    means nothing to the scikit-learn baseline, for example).
    """
    sig = inspect.signature(quantizer_cls.__init__)
    # parameters of __init__, except 'self' and **kwargs
    valid = {
        p.name for p in sig.parameters.values()
        if p.name != 'self' and p.kind is not inspect.Parameter.VAR_KEYWORD
    }

    init_kwargs = {}
    if n_clusters is not None and 'n_clusters' in valid:
        init_kwargs['n_clusters'] = n_clusters
    if random_state is not None and 'random_state' in valid:
        init_kwargs['random_state'] = random_state
    for k, v in extra_kwargs.items():
        if k in valid:
            init_kwargs[k] = v

    return quantizer_cls(**init_kwargs)


def compute_metrics_over_k(
    quantizer_cls,
    X: np.ndarray,
    k_range,
    *,
    random_state: int = None,
    **quantizer_kwargs
) -> pd.DataFrame:
    """
    Fit one quantizer per k and collect its quality metrics.

    Args:
      quantizer_cls     : KMeansQuantizer or SklearnKMeansQuantizer
      X                 : pixel buffer (height, width, 3)
      k_range           : iterable of palette sizes
      random_state      : passed into the quantizer init
      **quantizer_kwargs: any other init args (max_iter, threshold, ...)

    Returns:
      DataFrame with one row per k, indexed by n_clusters.
    """
    records = []
    for k in k_range:
        q = _make_quantizer(
            quantizer_cls,
            n_clusters=k,
            random_state=random_state,
            **quantizer_kwargs
        )
        q.fit(X)
        m = q.get_metrics()

        records.append({
            "n_clusters":        k,
            "inertia":           q.inertia_,
            "mse":               m["mse"],
            "psnr":              m["psnr"],
            "silhouette":        m["silhouette"],
            "calinski_harabasz": m["calinski_harabasz"],
            "davies_bouldin":    m["davies_bouldin"],
            "unbalanced_factor": m["unbalanced_factor"],
            "n_iter":            q.n_iter_,
            "empty_clusters":    len(q.empty_clusters_),
        })
        logger.debug("k=%d inertia=%.1f psnr=%.2f", k, q.inertia_, m["psnr"])

    df = pd.DataFrame(records).set_index("n_clusters", drop=False)
    return df


def save_palette(palette, filepath: str, population=None) -> None:
    """
    Write the palette as CSV; columns = ['cluster', 'r', 'g', 'b', 'population'].
    """
    palette = np.asarray(palette).reshape(-1, 3)
    df = pd.DataFrame(palette, columns=["r", "g", "b"])
    df.index.name = "cluster"
    if population is not None:
        df["population"] = [population.get(i, 0) for i in range(len(df))]
    df.to_csv(filepath)


def save_pixel_labels(labels: np.ndarray, filepath: str) -> None:
    """
    Dump a CSV of pixel coordinates with their cluster index.
    Columns = ['row', 'col', 'cluster'], row-major.
    """
    labels = np.asarray(labels)
    rows, cols = np.indices(labels.shape)
    df = pd.DataFrame({
        "row": rows.reshape(-1),
        "col": cols.reshape(-1),
        "cluster": labels.reshape(-1),
    })
    df.to_csv(filepath, index=False)


def run_and_report(
    name: str,
    cls,
    X: np.ndarray,
    k_range,
    *,
    random_state: int = None,
    **quantizer_kwargs,
):
    """
    Sweep k_range, pick k at the inertia elbow and write:
      - {name}_metrics.csv
      - {name}_metrics.png
      - {name}_palette.csv and {name}_palette.png for the chosen k

    Returns (best_k, fitted quantizer at best_k, metrics DataFrame).
    """
    logger.info("=== %s ===", name.upper())

    df = compute_metrics_over_k(
        cls,
        X,
        k_range,
        random_state=random_state,
        **quantizer_kwargs
    )
    best_k = find_elbow_k(df)
    df["best_k"] = df["n_clusters"] == best_k
    df.to_csv(f"{name}_metrics.csv", index=False)
    logger.info("Best k by inertia elbow: %d", best_k)

    fig = plot_metrics_over_k(df, best_k=best_k)
    fig.savefig(f"{name}_metrics.png")
    plt.close(fig)

    final = _make_quantizer(
        cls,
        n_clusters=best_k,
        random_state=random_state,
        **quantizer_kwargs
    )
    final.fit(X)
    population = final.get_metrics()["population"]
    save_palette(final.get_palette(), f"{name}_palette.csv", population=population)

    fig = plot_palette(final.get_palette(), population=population)
    fig.savefig(f"{name}_palette.png")
    plt.close(fig)

    return best_k, final, df
