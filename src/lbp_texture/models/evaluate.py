from dataclasses import dataclass, field

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from loguru import logger
from sklearn.metrics import classification_report, confusion_matrix


@dataclass
class ClassificationReport:
    """
    Per-class classification counters of one test run.

    correct[c] and total[c] are indexed by the true label. Ratios are only
    computed when reporting.
    """

    num_classes: int
    correct: np.ndarray = None
    total: np.ndarray = None
    y_true: list = field(default_factory=list)
    y_pred: list = field(default_factory=list)
    skipped: list = field(default_factory=list)

    def __post_init__(self):
        if self.correct is None:
            self.correct = np.zeros(self.num_classes, dtype=np.int64)
        if self.total is None:
            self.total = np.zeros(self.num_classes, dtype=np.int64)

    def record(self, true_label, predicted_label):
        self.total[true_label] += 1
        if predicted_label == true_label:
            self.correct[true_label] += 1
        self.y_true.append(int(true_label))
        self.y_pred.append(int(predicted_label))

    @property
    def n_correct(self):
        return int(self.correct.sum())

    @property
    def n_total(self):
        return int(self.total.sum())

    @property
    def accuracy(self):
        """Overall accuracy, NaN when no test sample was counted."""
        if self.n_total == 0:
            return float("nan")
        return self.n_correct / self.n_total

    def per_class(self):
        rows = []
        for c in range(self.num_classes):
            correct, total = int(self.correct[c]), int(self.total[c])
            rows.append((c, correct, total, correct / total if total else None))
        return rows

    def format(self):
        lines = [f"Class {c}: {correct}/{total}" for c, correct, total, _ in self.per_class()]
        lines.append("")
        lines.append(f"Total: {self.n_correct}/{self.n_total} = {self.accuracy:f}")
        if self.skipped:
            lines.append(f"Skipped: {len(self.skipped)} test samples")
        return "\n".join(lines)

    def confusion_matrix(self):
        labels = list(range(self.num_classes))
        if not self.y_true:
            return np.zeros((self.num_classes, self.num_classes), dtype=np.int64)
        return confusion_matrix(self.y_true, self.y_pred, labels=labels)

    def classification_report(self):
        labels = list(range(self.num_classes))
        return classification_report(self.y_true, self.y_pred, labels=labels, zero_division=0)


def plot_confusion_matrix(report, out_path, class_names=None):
    """Save the report's confusion matrix as a heatmap."""
    cm = report.confusion_matrix()
    names = class_names or [str(c) for c in range(report.num_classes)]

    fig = plt.figure(figsize=(8, 6))
    sns.heatmap(cm, annot=True, fmt='d', cmap='Blues', xticklabels=names, yticklabels=names)
    plt.title('Confusion Matrix')
    plt.ylabel('Actual Label')
    plt.xlabel('Predicted Label')
    fig.savefig(out_path)
    plt.close(fig)
    logger.info(f"Saved Confusion Matrix to {out_path}")
    return cm
