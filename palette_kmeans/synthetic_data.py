# synthetic_data.py

import numpy as np


def generate_block_image(colors, block_size=4, noise=0.0, random_state=None):
    """
    Horizontal strip of solid color blocks, one per entry of `colors`,
    each `block_size` x `block_size` pixels. Optional gaussian noise of std
    `noise` is added per channel and the result clipped to [0, 255].
    Returns uint8 array of shape (block_size, block_size * len(colors), 3).
    """
    colors = np.asarray(colors, dtype=float).reshape(-1, 3)
    img = np.repeat(colors[np.newaxis, :, :], block_size, axis=0)
    img = np.repeat(img, block_size, axis=1)
    if noise > 0:
        rs = np.random.RandomState(random_state)
        img = img + rs.normal(0.0, noise, size=img.shape)
    return np.clip(np.rint(img), 0, 255).astype(np.uint8)


def generate_gradient_image(height=16, width=16):
    """
    Smooth image with red rising left to right, green rising top to bottom
    and constant mid blue. Has up to height * width distinct colors.
    """
    r = np.linspace(0, 255, width)
    g = np.linspace(0, 255, height)
    img = np.empty((height, width, 3), dtype=np.uint8)
    img[..., 0] = np.rint(r)[np.newaxis, :]
    img[..., 1] = np.rint(g)[:, np.newaxis]
    img[..., 2] = 128
    return img


def generate_challenging_image(height=32, width=32, random_state=42):
    """
    Mix of palette-reduction difficulties in one buffer:
      - Two large flat regions (dark and light)
      - A small saturated patch (easy to swallow into a big cluster)
      - A gradient band
      - Uniform noise in the last rows
    Returns uint8 array of shape (height, width, 3).
    """
    rs = np.random.RandomState(random_state)
    img = np.zeros((height, width, 3), dtype=np.uint8)

    half = width // 2
    img[:, :half] = (20, 24, 30)
    img[:, half:] = (230, 225, 210)

    # small saturated patch
    p = max(1, height // 8)
    img[p:2 * p, p:2 * p] = (250, 10, 10)

    # gradient band
    band = slice(height // 2, height // 2 + max(1, height // 8))
    img[band, :, 2] = np.rint(np.linspace(0, 255, width)).astype(np.uint8)

    # noise rows
    n_noise = max(1, height // 8)
    img[-n_noise:] = rs.randint(0, 256, size=(n_noise, width, 3))
    return img
