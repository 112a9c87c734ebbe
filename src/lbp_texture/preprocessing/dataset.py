import os
import re
from dataclasses import dataclass, field

from loguru import logger

from lbp_texture.errors import MalformedDatasetLineError

_ATOI_PATTERN = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class Sample:
    path: str
    label: int


@dataclass
class DatasetStats:
    """Counters for the lines a lenient load skipped or repaired."""

    source: str
    lines: int = 0
    samples: int = 0
    skipped_lines: list = field(default_factory=list)
    defaulted_labels: list = field(default_factory=list)


def _atoi(text):
    # C atoi: leading whitespace, optional sign, leading digits, 0 otherwise
    match = _ATOI_PATTERN.match(text)
    return int(match.group(1)) if match else 0


def parse_line(line, strict=False, source="<list>", line_no=0):
    """
    Parse one '<label> <path>' record.

    Fields are separated by a single space and anything after the path is
    ignored. Returns a Sample, or None when the line has no path (lenient mode).
    In strict mode malformed lines raise MalformedDatasetLineError.
    """
    line = line.rstrip("\r\n")
    fields = line.split(" ")

    if len(fields) < 2 or not fields[1]:
        if strict and line.strip():
            raise MalformedDatasetLineError(source, line_no, line, "missing image path")
        return None

    key, path = fields[0], fields[1]
    if strict:
        try:
            label = int(key)
        except ValueError:
            raise MalformedDatasetLineError(source, line_no, line, "label is not an integer") from None
    else:
        label = _atoi(key)

    return Sample(path=path, label=label)


def load_dataset(filename, strict=False):
    """
    Load an ordered list of Samples from a dataset list file.

    Returns (samples, stats). Lenient mode keeps the permissive reading of the
    list format (skip lines without a path, unparseable labels become 0) but
    reports each case in stats and in the log.
    """
    source = os.fspath(filename)
    stats = DatasetStats(source=source)
    samples = []

    with open(source, "r", encoding="utf-8", errors="surrogateescape") as handle:
        for line_no, line in enumerate(handle, start=1):
            stats.lines += 1
            sample = parse_line(line, strict=strict, source=source, line_no=line_no)

            if sample is None:
                if line.strip():
                    stats.skipped_lines.append(line_no)
                    logger.warning(f"{source}:{line_no}: skipping line without image path: {line.rstrip()!r}")
                continue

            if not strict and not _ATOI_PATTERN.fullmatch(line.split(" ")[0]):
                stats.defaulted_labels.append(line_no)
                logger.warning(f"{source}:{line_no}: label {line.split(' ')[0]!r} read as {sample.label}")

            samples.append(sample)

    stats.samples = len(samples)
    logger.info(f"Loaded {stats.samples} samples from {source}")
    return samples, stats
