from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from lbp_texture.config import ClassificationConfig
from lbp_texture.errors import (
    DecodeFailure,
    DegenerateHistogramError,
    EmptyTrainingIndexError,
    LabelOutOfRangeError,
    NotTrainedError,
)
from lbp_texture.features.lbp_extractor import LBPExtractor
from lbp_texture.models.evaluate import ClassificationReport
from lbp_texture.models.nearest_neighbor import TrainingIndex
from lbp_texture.preprocessing.dataset import Sample
from lbp_texture.preprocessing.preprocess import load_grayscale


@dataclass(frozen=True)
class ProgressEvent:
    phase: str  # 'train' or 'test'
    position: int  # 1-based
    total: int
    sample: Sample
    status: str  # 'ok' or 'skipped'
    predicted: Optional[int] = None


@dataclass(frozen=True)
class SkippedSample:
    phase: str
    sample: Sample
    reason: str


class LBPClassifier:
    """
    Nearest-neighbour texture classifier on LBP histograms.

    Holds only the configuration and its collaborators; the TrainingIndex
    produced by train() is passed back explicitly to test().

    Args:
        config (ClassificationConfig): LBP and run parameters.
        decoder (callable): path -> grayscale image, raising DecodeFailure.
        observer (callable): receives a ProgressEvent per processed sample.
    """

    def __init__(
        self,
        config: Optional[ClassificationConfig] = None,
        decoder: Callable = load_grayscale,
        observer: Optional[Callable[[ProgressEvent], None]] = None,
    ):
        self.config = config or ClassificationConfig()
        self.extractor = LBPExtractor(self.config)
        self.decoder = decoder
        self.observer = observer

    def _notify(self, phase, position, total, sample, status, predicted=None):
        if self.observer is not None:
            self.observer(ProgressEvent(phase, position, total, sample, status, predicted))

    def _describe(self, phase, sample):
        """Return (descriptor, None), or (None, SkippedSample) when the sample has to be skipped."""
        try:
            image = self.decoder(sample.path)
            return self.extractor.extract(image), None
        except DecodeFailure as e:
            if not self.config.skip_unreadable:
                raise
            reason = str(e)
        except DegenerateHistogramError as e:
            reason = str(e)

        logger.warning(f"Skipping {phase} image {sample.path}: {reason}")
        return None, SkippedSample(phase, sample, reason)

    def train(self, samples) -> TrainingIndex:
        """Extract a descriptor for every training sample and freeze the index."""
        samples = list(samples)
        index = TrainingIndex(self.config.n_bins)

        for i, sample in enumerate(samples, start=1):
            descriptor, skip = self._describe("train", sample)
            if skip is not None:
                index.skipped.append(skip)
                self._notify("train", i, len(samples), sample, "skipped")
                continue
            index.add(descriptor, sample.label, sample.path)
            self._notify("train", i, len(samples), sample, "ok")

        index.freeze()
        logger.info(f"Training index built: {len(index)}/{len(samples)} images")
        return index

    def test(self, index: TrainingIndex, samples) -> ClassificationReport:
        """Classify every test sample against index and count hits per true label."""
        if not index.frozen:
            raise NotTrainedError("Training index must be frozen by train() before testing")
        if len(index) == 0:
            raise EmptyTrainingIndexError("Cannot test: the training index holds no descriptors")

        samples = list(samples)
        report = ClassificationReport(self.config.num_classes)

        for i, sample in enumerate(samples, start=1):
            if not 0 <= sample.label < self.config.num_classes:
                raise LabelOutOfRangeError(
                    f"Test label {sample.label} of {sample.path} outside [0, {self.config.num_classes})"
                )

            descriptor, skip = self._describe("test", sample)
            if skip is not None:
                report.skipped.append(skip)
                self._notify("test", i, len(samples), sample, "skipped")
                continue

            _, predicted, _ = index.query(descriptor)
            report.record(sample.label, predicted)
            self._notify("test", i, len(samples), sample, "ok", predicted)

        logger.info(f"Tested {report.n_total}/{len(samples)} images, accuracy {report.accuracy:.4f}")
        return report

    def run(self, train_samples, test_samples):
        """Train then test; returns (index, report)."""
        index = self.train(train_samples)
        return index, self.test(index, test_samples)
