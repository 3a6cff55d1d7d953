import numpy as np


class Centroid:
    """
    A color point in RGB space plus the pixel coordinates currently
    assigned to it.

    Members are stored as chunks of (row, col) pairs so that a whole
    assignment pass can be appended at once; the chunk list is cleared,
    not rebuilt, between passes.
    """

    def __init__(self, r=0, g=0, b=0):
        self.r = int(r)
        self.g = int(g)
        self.b = int(b)
        self._chunks = []

    def __repr__(self):
        return f"Centroid(r={self.r}, g={self.g}, b={self.b}, n_members={self.n_members})"

    @property
    def color(self):
        return (self.r, self.g, self.b)

    @color.setter
    def color(self, rgb):
        self.r, self.g, self.b = (int(c) for c in rgb)

    def initialize_random(self, rng=None):
        """
        Draw R, G, B independently and uniformly from {0, ..., 255}.
        Membership is left untouched.
        """
        if rng is None:
            rng = np.random.RandomState()
        self.r, self.g, self.b = (int(c) for c in rng.randint(0, 256, size=3))

    def clear_members(self):
        self._chunks.clear()

    def add_member(self, coord):
        self._chunks.append(np.asarray(coord, dtype=np.intp).reshape(1, 2))

    def add_members(self, coords):
        coords = np.asarray(coords, dtype=np.intp).reshape(-1, 2)
        if len(coords):
            self._chunks.append(coords)

    @property
    def n_members(self):
        return sum(len(c) for c in self._chunks)

    @property
    def members(self):
        # (n, 2) array of (row, col), in insertion order
        if not self._chunks:
            return np.empty((0, 2), dtype=np.intp)
        if len(self._chunks) == 1:
            return self._chunks[0]
        return np.vstack(self._chunks)
