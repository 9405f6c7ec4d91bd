import numpy as np
import pandas as pd


class NodeIndex:
    """Two-way mapping between node labels and dense matrix indices.

    Labels are kept in the order the matrix indices were assigned, which for
    edge lists is the order of first occurrence in the input.
    """

    def __init__(self, labels, name=None):
        self.labels = pd.Index(labels)
        self.name = name
        self._positions = None

    @classmethod
    def positional(cls, size, name=None):
        """Labels ``1..size``, used when a matrix carries no names."""
        return cls(np.arange(1, size + 1), name=name)

    def __len__(self):
        return len(self.labels)

    def __repr__(self):
        return f"NodeIndex(name={self.name!r}, size={len(self)})"

    def label(self, index):
        return self.labels[index]

    def index(self, label):
        if self._positions is None:
            self._positions = {value: i for i, value in enumerate(self.labels)}
        try:
            return self._positions[label]
        except KeyError:
            raise KeyError(f"Unknown node label: {label!r}") from None

    def take(self, indices):
        """Labels for the given dense indices, in the given order."""
        return self.labels[np.asarray(indices, dtype=np.intp)]
