import numpy as np
import matplotlib.pyplot as plt
import matplotlib as mpl


DEFAULT_PALETTE = [
    "#0072B2", "#E69F00", "#009E73",
    "#D55E00", "#CC79A7", "#56B4E9",
]

METRIC_PANELS = [
    ('inertia',           'Inertia'),
    ('psnr',              'PSNR (dB)'),
    ('silhouette',        'Silhouette Score'),
    ('calinski_harabasz', 'Calinski–Harabasz Index'),
    ('davies_bouldin',    'Davies–Bouldin Index'),
    ('unbalanced_factor', 'Unbalanced Factor'),
]

DESCRIPTIONS = {
    'Inertia':                 'Sum of squared RGB distances to the palette color; lower is a closer fit.',
    'PSNR (dB)':               'Peak signal-to-noise ratio of the repainted image; higher is closer to the original.',
    'Silhouette Score':        'Mean silhouette coefficient on a pixel sample (range –1 to +1); higher means better separated colors.',
    'Calinski–Harabasz Index': 'Ratio of between-cluster to within-cluster dispersion; higher indicates well-defined clusters.',
    'Davies–Bouldin Index':    'Average similarity of each cluster with its most similar one; lower indicates better separation.',
    'Unbalanced Factor':       'Ratio of largest to smallest non-empty cluster; lower means pixels are spread more evenly.',
}


def _set_axes_limits(ax, ks, y, num_yticks):
    kmin, kmax = int(ks.min()), int(ks.max())
    if kmin == kmax:
        ax.set_xlim(kmin - 0.5, kmax + 0.5)
    else:
        ax.set_xlim(kmin, kmax)
    ax.set_xticks(np.arange(kmin, kmax + 1))

    finite = np.isfinite(y)
    if finite.any():
        ymin, ymax = float(np.min(y[finite])), float(np.max(y[finite]))
    else:
        ymin, ymax = 0.0, 1.0

    if ymin == ymax:
        delta = abs(ymin) * 0.1 if ymin != 0 else 1.0
        ymin -= delta
        ymax += delta

    ax.set_ylim(ymin, ymax)
    ax.set_yticks(np.linspace(ymin, ymax, num=num_yticks))


def plot_metrics_over_k(
    metrics_df,
    best_k=None,
    fontsize=12,
    linewidth=2,
    palette=None,
    num_yticks=5,
):
    """
    2×3 grid of the k-sweep metrics with a shared X‐axis.

    Only the bottom row shows X‐ticks and X‐labels. When `best_k` is given it
    is marked on every panel.
    """
    mpl.rcParams['font.size'] = fontsize
    if palette is None:
        palette = DEFAULT_PALETTE
    line_color = palette[0]

    fig, axes = plt.subplots(2, 3, figsize=(18, 9), sharex=True)
    axes_flat = axes.flatten()
    ks = metrics_df['n_clusters'].to_numpy()

    for ax, (col, title) in zip(axes_flat, METRIC_PANELS):
        y = metrics_df[col].to_numpy(dtype=float)
        ax.plot(ks, y, 'o-', lw=linewidth, color=line_color)
        if best_k is not None:
            ax.axvline(best_k, color=palette[1], linestyle='--', linewidth=2, label='Chosen k')
            ax.legend()
        ax.set_title(title)
        ax.set_ylabel(title)
        ax.grid(True)
        _set_axes_limits(ax, ks, y, num_yticks)

    for ax in axes_flat[:3]:
        ax.tick_params(axis='x', labelbottom=False)
    for ax in axes_flat[3:]:
        ax.tick_params(axis='x', labelbottom=True)
        ax.set_xlabel('Number of colors')

    lines = [
        f"{i+1}. {title}: {DESCRIPTIONS[title]}"
        for i, (_, title) in enumerate(METRIC_PANELS)
    ]
    fig.subplots_adjust(bottom=0.22)
    fig.text(
        0.01, 0.01, "\n".join(lines),
        ha='left', va='bottom',
        fontsize=fontsize * 0.9,
        wrap=True,
        multialignment='left'
    )
    return fig


def plot_palette(palette, population=None, title=None, figsize=(8, 2), savepath=None):
    """
    One swatch per palette color. With `population`, swatch widths are
    proportional to the pixel count of each cluster; empty clusters are
    drawn as thin outlined slots.

    Returns:
      fig : the matplotlib Figure
    """
    palette = np.asarray(palette).reshape(-1, 3)
    n = len(palette)
    if population is not None:
        widths = np.array([population.get(i, 0) for i in range(n)], dtype=float)
        total = widths.sum()
        widths = widths / total if total > 0 else np.full(n, 1.0 / max(n, 1))
        widths = np.maximum(widths, 0.01)
    else:
        widths = np.full(n, 1.0 / max(n, 1))

    fig, ax = plt.subplots(figsize=figsize)
    left = 0.0
    for idx, (color, w) in enumerate(zip(palette, widths)):
        rgb = np.clip(color, 0, 255) / 255.0
        ax.barh(0, w, left=left, height=1.0, color=rgb, edgecolor='black', linewidth=0.5)
        ax.text(
            left + w / 2, 0, f"{idx}",
            ha='center', va='center', fontsize='small',
            color='white' if rgb.mean() < 0.5 else 'black'
        )
        left += w

    ax.set_xlim(0, max(left, 1e-9))
    ax.set_ylim(-0.5, 0.5)
    ax.set_axis_off()
    if title:
        ax.set_title(title)
    plt.tight_layout()

    if savepath:
        fig.savefig(savepath)
    return fig
