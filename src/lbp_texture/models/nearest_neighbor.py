import numpy as np

from lbp_texture.errors import DescriptorMismatchError, EmptyTrainingIndexError


def _as_matrix(histograms):
    if isinstance(histograms, TrainingIndex):
        return histograms.descriptors
    matrix = np.asarray(histograms, dtype=np.float64)
    if matrix.ndim == 1 and matrix.size == 0:
        return matrix.reshape(0, 0)
    if matrix.ndim != 2:
        raise DescriptorMismatchError(f"Expected a 2D collection of descriptors, got shape {matrix.shape}")
    return matrix


def nearest(hist, histograms):
    """
    Find the training descriptor closest to hist in Euclidean distance.

    Returns (index, distance). The first index reaching the minimum wins ties.
    NaN distances never win; if all distances are NaN, index 0 is returned.
    """
    matrix = _as_matrix(histograms)
    if matrix.shape[0] == 0:
        raise EmptyTrainingIndexError("Nearest-neighbour search needs at least one training descriptor")

    query = np.asarray(hist, dtype=np.float64)
    if query.ndim != 1 or query.shape[0] != matrix.shape[1]:
        raise DescriptorMismatchError(
            f"Query descriptor has shape {query.shape}, training descriptors have length {matrix.shape[1]}"
        )

    distances = np.sqrt(np.sum((matrix - query) ** 2, axis=1))
    # argmin returns the first minimum, which gives the lowest-index tie-break
    index = int(np.argmin(np.where(np.isnan(distances), np.inf, distances)))
    return index, float(distances[index])


def nn_search(hist, histograms):
    """Index of the nearest training descriptor."""
    return nearest(hist, histograms)[0]


class TrainingIndex:
    """
    Descriptors and labels of the training set, in dataset order.

    Filled with add() during training and frozen before testing; a frozen index
    is read-only and safe to query from several threads.
    """

    def __init__(self, n_bins):
        self.n_bins = n_bins
        self._rows = []
        self._labels = []
        self._paths = []
        self._descriptors = None
        self.frozen = False
        # training samples left out of the index (unreadable or degenerate)
        self.skipped = []

    @classmethod
    def from_pairs(cls, descriptors, labels, paths=None):
        """Build and freeze an index from parallel descriptor/label sequences."""
        descriptors = [np.asarray(d, dtype=np.float64) for d in descriptors]
        labels = list(labels)
        if len(descriptors) != len(labels):
            raise ValueError(f"{len(descriptors)} descriptors but {len(labels)} labels")
        if not descriptors:
            raise EmptyTrainingIndexError("Cannot build a training index without descriptors")

        index = cls(descriptors[0].shape[0])
        paths = paths if paths is not None else [None] * len(labels)
        for descriptor, label, path in zip(descriptors, labels, paths):
            index.add(descriptor, label, path)
        return index.freeze()

    def add(self, descriptor, label, path=None):
        if self.frozen:
            raise RuntimeError("Training index is frozen")
        descriptor = np.asarray(descriptor, dtype=np.float64)
        if descriptor.shape != (self.n_bins,):
            raise DescriptorMismatchError(
                f"Descriptor has shape {descriptor.shape}, index expects ({self.n_bins},)"
            )
        self._rows.append(descriptor)
        self._labels.append(int(label))
        self._paths.append(path)

    def freeze(self):
        if not self.frozen:
            if self._rows:
                self._descriptors = np.vstack(self._rows)
            else:
                self._descriptors = np.empty((0, self.n_bins), dtype=np.float64)
            self._descriptors.setflags(write=False)
            self._rows = []
            self.frozen = True
        return self

    @property
    def descriptors(self):
        if not self.frozen:
            if not self._rows:
                return np.empty((0, self.n_bins), dtype=np.float64)
            return np.vstack(self._rows)
        return self._descriptors

    @property
    def labels(self):
        return list(self._labels)

    @property
    def paths(self):
        return list(self._paths)

    def query(self, hist):
        """Return (index, label, distance) of the nearest training descriptor."""
        index, distance = nearest(hist, self)
        return index, self._labels[index], distance

    def __len__(self):
        return len(self._labels)

    def __repr__(self):
        return f"TrainingIndex(size={len(self)}, n_bins={self.n_bins}, frozen={self.frozen})"
