"""Loading of CSV files into normalised training and test sets."""

from __future__ import annotations

import csv
import random
from dataclasses import dataclass, field
from typing import Sequence

Vector = list[float]

_INITIAL_MIN = 1e9
_INITIAL_MAX = -1e9


class DatasetError(ValueError):
    """Raised when a CSV file cannot be turned into a dataset."""


@dataclass
class Dataset:
    """Normalised inputs and targets, split into training and test parts."""

    train_inputs: list[Vector]
    train_targets: list[Vector]
    test_inputs: list[Vector]
    test_targets: list[Vector]
    input_size: int
    output_size: int
    input_mins: Vector
    input_maxs: Vector
    target_mins: Vector = field(default_factory=list)
    target_maxs: Vector = field(default_factory=list)
    class_map: dict[str, int] | None = None


def shuffle(inputs: list[Vector], targets: list[Vector]) -> None:
    """Shuffle both lists in place, keeping each input with its target."""
    if len(inputs) != len(targets):
        raise ValueError(
            f"inputs and targets differ in length: {len(inputs)} != {len(targets)}"
        )
    pairs = list(zip(inputs, targets))
    random.shuffle(pairs)
    inputs[:] = [pair[0] for pair in pairs]
    targets[:] = [pair[1] for pair in pairs]


def split_data(
    inputs: Sequence[Vector], targets: Sequence[Vector], split_ratio: float
) -> tuple[list[Vector], list[Vector], list[Vector], list[Vector]]:
    """Split into (train inputs, train targets, test inputs, test targets)."""
    split_index = int(len(inputs) * split_ratio)
    if not 0 <= split_index <= len(inputs) or split_index > len(targets):
        raise ValueError(f"split ratio {split_ratio} out of range")
    return (
        list(inputs[:split_index]),
        list(targets[:split_index]),
        list(inputs[split_index:]),
        list(targets[split_index:]),
    )


def _parse_float(text: str) -> float:
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid number: {text!r}")
    return float(text)


def _read_csv(file_path: str) -> tuple[list[str], list[list[str]]]:
    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        header: list[str] | None = None
        records: list[list[str]] = []
        try:
            for row in reader:
                if not row:
                    continue
                if header is None:
                    header = row
                elif len(row) != len(header):
                    raise DatasetError(
                        f"record on line {reader.line_num}: wrong number of fields"
                    )
                else:
                    records.append(row)
        except csv.Error as exc:
            raise DatasetError(f"malformed CSV: {exc}") from exc
    if header is None:
        raise DatasetError(f"{file_path}: no header row")
    return header, records


def _scale(value: float, low: float, high: float) -> float:
    span = high - low
    return 0.0 if span == 0 else (value - low) / span


def _column_ranges(
    records: Sequence[Sequence[str]], columns: int
) -> tuple[list[float], list[float]]:
    mins = [_INITIAL_MIN] * columns
    maxs = [_INITIAL_MAX] * columns
    for record in records:
        for i, text in enumerate(record[:columns]):
            try:
                value = _parse_float(text)
            except ValueError as exc:
                raise DatasetError(
                    f"error parsing float in record {record}: {exc}"
                ) from exc
            mins[i] = min(mins[i], value)
            maxs[i] = max(maxs[i], value)
    return mins, maxs


def _looks_numeric(text: str) -> bool:
    try:
        _parse_float(text)
    except ValueError:
        return False
    return True


def _build_regression(
    header: list[str], records: list[list[str]], split_ratio: float
) -> Dataset:
    input_size = len(header) - 1
    mins, maxs = _column_ranges(records, input_size + 1)

    inputs: list[Vector] = []
    targets: list[Vector] = []
    for record in records:
        values = [_parse_float(text) for text in record[: input_size + 1]]
        scaled = [_scale(v, lo, hi) for v, lo, hi in zip(values, mins, maxs)]
        inputs.append(scaled[:input_size])
        targets.append(scaled[input_size:])

    shuffle(inputs, targets)
    train_in, train_out, test_in, test_out = split_data(inputs, targets, split_ratio)
    return Dataset(
        train_inputs=train_in,
        train_targets=train_out,
        test_inputs=test_in,
        test_targets=test_out,
        input_size=input_size,
        output_size=1,
        input_mins=mins[:input_size],
        input_maxs=maxs[:input_size],
        target_mins=mins[input_size:],
        target_maxs=maxs[input_size:],
    )


def _build_classification(
    header: list[str], records: list[list[str]], split_ratio: float
) -> Dataset:
    input_size = len(header) - 1
    class_map: dict[str, int] = {}
    for record in records:
        class_map.setdefault(record[input_size], len(class_map))
    output_size = len(class_map)

    mins, maxs = _column_ranges(records, input_size)

    inputs: list[Vector] = []
    targets: list[Vector] = []
    for record in records:
        inputs.append(
            [
                _scale(_parse_float(text), lo, hi)
                for text, lo, hi in zip(record[:input_size], mins, maxs)
            ]
        )
        one_hot = [0.0] * output_size
        one_hot[class_map[record[input_size]]] = 1.0
        targets.append(one_hot)

    shuffle(inputs, targets)
    train_in, train_out, test_in, test_out = split_data(inputs, targets, split_ratio)
    return Dataset(
        train_inputs=train_in,
        train_targets=train_out,
        test_inputs=test_in,
        test_targets=test_out,
        input_size=input_size,
        output_size=output_size,
        input_mins=mins,
        input_maxs=maxs,
        class_map=class_map,
    )


def load_csv(file_path: str, split_ratio: float) -> Dataset:
    """Load a CSV file whose last column is the target.

    A non-numeric last column in the first record makes it a classification
    set with one-hot targets; otherwise inputs and target are scaled to [0, 1].
    """
    header, records = _read_csv(file_path)
    if records and not _looks_numeric(records[0][-1]):
        return _build_classification(header, records, split_ratio)
    return _build_regression(header, records, split_ratio)


def load_csv_for_classification(file_path: str, split_ratio: float) -> Dataset:
    """Load a CSV file whose last column holds class names."""
    header, records = _read_csv(file_path)
    return _build_classification(header, records, split_ratio)