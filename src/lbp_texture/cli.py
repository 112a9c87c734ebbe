from pathlib import Path
from typing import Optional

import numpy as np
import typer
from rich import print
from tqdm import tqdm

from lbp_texture.config import (
    DEFAULT_NUM_CLASSES,
    DEFAULT_POINTS,
    DEFAULT_RADIUS,
    DEFAULT_STRIDE,
    ClassificationConfig,
)
from lbp_texture.errors import LBPTextureError
from lbp_texture.logger import setup_logging

app = typer.Typer(help="LBP texture classification CLI")


class TqdmObserver:
    """Progress bar per phase, fed by the classifier's ProgressEvents."""

    def __init__(self):
        self.bars = {}

    def __call__(self, event):
        bar = self.bars.get(event.phase)
        if bar is None:
            bar = tqdm(total=event.total, desc=f"Extracting LBP histograms ({event.phase})", unit="img")
            self.bars[event.phase] = bar
        bar.update(1)
        if event.position == event.total:
            bar.close()

    def close(self):
        for bar in self.bars.values():
            bar.close()


@app.command()
def classify(
    train_list: Path = typer.Argument(..., exists=True, dir_okay=False, help="Train list: '<label> <path>' per line"),
    test_list: Path = typer.Argument(..., exists=True, dir_okay=False, help="Test list: '<label> <path>' per line"),
    points: int = typer.Option(DEFAULT_POINTS, help="Number of circular comparison points (P)"),
    radius: float = typer.Option(DEFAULT_RADIUS, help="Sampling radius in pixels (R)"),
    classes: int = typer.Option(DEFAULT_NUM_CLASSES, help="Number of target classes (C)"),
    stride: int = typer.Option(DEFAULT_STRIDE, help="Spatial stride of the histogram scan"),
    degenerate: str = typer.Option("skip", help="Images with no sampled pixel: skip, zeros or nan"),
    strict_lists: bool = typer.Option(False, "--strict-lists", help="Reject malformed list lines"),
    abort_on_unreadable: bool = typer.Option(False, "--abort-on-unreadable", help="Stop on the first unreadable image"),
    confusion_plot: Optional[Path] = typer.Option(None, help="Save a confusion matrix heatmap to this file"),
    details: bool = typer.Option(False, "--details", help="Print the per-class precision/recall report"),
    log_level: str = typer.Option("INFO", help="Log level"),
    log_file: Optional[Path] = typer.Option(None, help="Also log to this file"),
):
    """
    Train on TRAIN_LIST, classify TEST_LIST and print per-class accuracy.
    """
    from lbp_texture.models.evaluate import plot_confusion_matrix
    from lbp_texture.pipeline.classifier import LBPClassifier
    from lbp_texture.preprocessing.dataset import load_dataset

    setup_logging(log_level, log_file)
    observer = TqdmObserver()

    try:
        config = ClassificationConfig(
            points=points,
            radius=radius,
            num_classes=classes,
            stride=stride,
            degenerate=degenerate,
            skip_unreadable=not abort_on_unreadable,
        )
        train_samples, _ = load_dataset(train_list, strict=strict_lists)
        test_samples, _ = load_dataset(test_list, strict=strict_lists)

        classifier = LBPClassifier(config, observer=observer)
        _, report = classifier.run(train_samples, test_samples)
    except LBPTextureError as e:
        observer.close()
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo()
    typer.echo(report.format())

    if details and report.n_total:
        typer.echo()
        typer.echo(report.classification_report())

    if confusion_plot is not None:
        plot_confusion_matrix(report, confusion_plot)
        print(f"[green]Saved confusion matrix to {confusion_plot}[/green]")


@app.command()
def describe(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to describe"),
    points: int = typer.Option(DEFAULT_POINTS, help="Number of circular comparison points (P)"),
    radius: float = typer.Option(DEFAULT_RADIUS, help="Sampling radius in pixels (R)"),
    stride: int = typer.Option(DEFAULT_STRIDE, help="Spatial stride of the histogram scan"),
    plot: Optional[Path] = typer.Option(None, help="Save image, LBP map and histogram to this file"),
):
    """
    Print the non-zero bins of an image's LBP descriptor.
    """
    from lbp_texture.features.lbp_extractor import LBPExtractor
    from lbp_texture.features.utils import plot_lbp_histogram
    from lbp_texture.preprocessing.preprocess import load_grayscale

    try:
        config = ClassificationConfig(points=points, radius=radius, stride=stride)
        pixels = load_grayscale(image)
        hist = LBPExtractor(config).extract(pixels)
    except LBPTextureError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"{image}: {pixels.width}x{pixels.height}, {hist.size} bins")
    for code in np.flatnonzero(hist):
        typer.echo(f"  {int(code):>6d}  {hist[code]:.6f}")

    if plot is not None:
        plot_lbp_histogram(pixels, config, title=image.name, out_path=plot)
        print(f"[green]Saved LBP plot to {plot}[/green]")


if __name__ == "__main__":
    app()
