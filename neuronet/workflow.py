"""Training, evaluation, prediction and model storage steps behind the UI."""

from __future__ import annotations

import fnmatch
import math
import os
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from .dataset import Dataset, load_csv
from .model_data import ModelData
from .network import init_network

DEFAULT_HIDDEN_LAYERS = "20,20"
DEFAULT_HIDDEN_ACTIVATIONS = "relu,relu"
DEFAULT_OUTPUT_ACTIVATION = "linear"
DEFAULT_EPOCHS = "1000"
DEFAULT_LEARNING_RATE = "0.001"
DEFAULT_ERROR_GOAL = "0.001"
TRAIN_SPLIT = 0.8
MODELS_DIRECTORY = "saved_models"

_FORM_FIELDS = 7
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class WorkflowError(Exception):
    """Raised when a user request cannot be carried out."""


@dataclass
class TrainingConfig:
    """Everything needed to train a network from a CSV file."""

    csv_path: str
    hidden_layers: list[int]
    hidden_activations: list[str]
    output_activation: str
    epochs: int
    learning_rate: float
    error_goal: float


def _parse_int(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _parse_float(text: str) -> float:
    if text != text.strip() or "_" in text or not text:
        raise ValueError(f"invalid number: {text!r}")
    return float(text)


def _select(items: Sequence[str], selection: str, what: str) -> str:
    try:
        index = _parse_int(selection)
    except ValueError:
        raise WorkflowError(f"invalid {what} selection") from None
    if not 1 <= index <= len(items):
        raise WorkflowError(f"invalid {what} selection")
    return items[index - 1]


def parse_training_config(
    values: Sequence[str], csv_files: Sequence[str]
) -> TrainingConfig:
    """Turn the seven form values into a training configuration.

    The values are: CSV file number, hidden layer sizes, hidden activations,
    output activation, epochs, learning rate and error goal. Empty values
    take their defaults.
    """
    if len(values) != _FORM_FIELDS:
        raise ValueError(f"expected {_FORM_FIELDS} form values, got {len(values)}")
    (
        csv_choice,
        layers_text,
        activations_text,
        output_activation,
        epochs_text,
        lr_text,
        goal_text,
    ) = values

    csv_path = _select(csv_files, csv_choice, "CSV file")

    hidden_layers: list[int] = []
    for part in (layers_text or DEFAULT_HIDDEN_LAYERS).split(","):
        try:
            hidden_layers.append(_parse_int(part.strip()))
        except ValueError as exc:
            raise WorkflowError(f"invalid hidden layers: {exc}") from exc

    hidden_activations = (activations_text or DEFAULT_HIDDEN_ACTIVATIONS).split(",")

    try:
        epochs = _parse_int(epochs_text or DEFAULT_EPOCHS)
    except ValueError as exc:
        raise WorkflowError(f"invalid epochs value: {exc}") from exc
    try:
        learning_rate = _parse_float(lr_text or DEFAULT_LEARNING_RATE)
    except ValueError as exc:
        raise WorkflowError(f"invalid learning rate: {exc}") from exc
    try:
        error_goal = _parse_float(goal_text or DEFAULT_ERROR_GOAL)
    except ValueError as exc:
        raise WorkflowError(f"invalid error goal: {exc}") from exc

    return TrainingConfig(
        csv_path=csv_path,
        hidden_layers=hidden_layers,
        hidden_activations=hidden_activations,
        output_activation=output_activation or DEFAULT_OUTPUT_ACTIVATION,
        epochs=epochs,
        learning_rate=learning_rate,
        error_goal=error_goal,
    )


def run_training(
    config: TrainingConfig,
    on_epoch: Callable[[int, float], object] | None = None,
) -> tuple[ModelData, Dataset]:
    """Load the data, train a new network and return it with the dataset.

    ``on_epoch`` receives the epoch number, counted from 1, and the mean error.
    """
    try:
        dataset = load_csv(config.csv_path, TRAIN_SPLIT)
    except (OSError, ValueError) as exc:
        raise WorkflowError(f"failed to load CSV data: {exc}") from exc

    try:
        network = init_network(
            dataset.input_size,
            config.hidden_layers,
            dataset.output_size,
            config.hidden_activations,
            config.output_activation,
        )
    except (ValueError, ZeroDivisionError) as exc:
        raise WorkflowError(f"failed to build network: {exc}") from exc

    epoch_number = 0

    def report(loss: float) -> None:
        nonlocal epoch_number
        epoch_number += 1
        if on_epoch is not None:
            on_epoch(epoch_number, loss)

    try:
        network.train(
            dataset.train_inputs,
            dataset.train_targets,
            config.epochs,
            config.learning_rate,
            config.error_goal,
            report,
        )
    except ValueError as exc:
        raise WorkflowError(f"training failed: {exc}") from exc

    model_data = ModelData(
        nn=network,
        input_mins=dataset.input_mins,
        input_maxs=dataset.input_maxs,
        target_mins=dataset.target_mins,
        target_maxs=dataset.target_maxs,
        class_map=dataset.class_map,
    )
    return model_data, dataset


def _argmax(values: Sequence[float]) -> int:
    best = -1.0
    best_index = -1
    for index, value in enumerate(values):
        if value > best:
            best = value
            best_index = index
    return best_index


def evaluate(model_data: ModelData, dataset: Dataset) -> float:
    """Return the share of test samples classified correctly.

    Regression sets count no sample as correct; an empty test set gives NaN.
    """
    if not dataset.test_inputs:
        return math.nan
    correct = 0
    if dataset.class_map is not None:
        for sample, target in zip(dataset.test_inputs, dataset.test_targets):
            _, prediction = model_data.nn.feed_forward(sample)
            actual = next((i for i, v in enumerate(target) if v == 1.0), -1)
            if _argmax(prediction) == actual:
                correct += 1
    return correct / len(dataset.test_inputs)


def _scale(value: float, low: float, high: float) -> float:
    offset = value - low
    span = high - low
    if span:
        return offset / span
    if offset == 0 or math.isnan(offset):
        return math.nan
    return math.copysign(math.inf, offset) * math.copysign(1.0, span)


def predict(model_data: ModelData, text: str) -> float | str:
    """Predict from comma-separated raw input values.

    Returns the class name for a classifier, otherwise the target value
    scaled back to its original range.
    """
    network = model_data.nn
    try:
        network.set_activation_functions()
    except ValueError as exc:
        raise WorkflowError(f"failed to set activation functions: {exc}") from exc

    parts = text.strip().split(",")
    if len(parts) != network.num_inputs:
        raise WorkflowError(
            f"expected {network.num_inputs} input values, but got {len(parts)}"
        )
    if len(model_data.input_mins) < len(parts) or len(model_data.input_maxs) < len(parts):
        raise WorkflowError("model has no input ranges for every input")

    sample: list[float] = []
    for part, low, high in zip(parts, model_data.input_mins, model_data.input_maxs):
        try:
            value = _parse_float(part.strip())
        except ValueError as exc:
            raise WorkflowError(f"invalid input value: {exc}") from exc
        sample.append(_scale(value, low, high))

    _, output = network.feed_forward(sample)

    if model_data.class_map is not None:
        best = _argmax(output)
        for name, index in model_data.class_map.items():
            if index == best:
                return name
        raise WorkflowError("could not determine class from prediction")

    if not output or not model_data.target_mins or not model_data.target_maxs:
        raise WorkflowError("model has no target range for regression")
    low = model_data.target_mins[0]
    high = model_data.target_maxs[0]
    return output[0] * (high - low) + low


def select_model(models: Sequence[str], selection: str) -> str:
    """Return the model path chosen by its 1-based number."""
    return _select(models, selection, "model")


def _glob(directory: str, pattern: str) -> list[str]:
    try:
        names = os.listdir(directory or ".")
    except OSError:
        return []
    matches = sorted(name for name in names if fnmatch.fnmatchcase(name, pattern))
    if directory in ("", "."):
        return matches
    return [os.path.join(directory, name) for name in matches]


def find_csv_files(directory: str = ".") -> list[str]:
    """Return the CSV files in ``directory``, sorted."""
    return _glob(directory, "*.csv")


def find_models(directory: str = MODELS_DIRECTORY) -> list[str]:
    """Return the saved model files in ``directory``, sorted."""
    return _glob(directory, "*.json")


def save_trained_model(
    model_data: ModelData, name: str, directory: str = MODELS_DIRECTORY
) -> str | None:
    """Save the model as ``<name>.json`` in ``directory``.

    An empty name skips saving and returns None; otherwise the path is returned.
    """
    if not name:
        return None
    path = os.path.join(directory, name + ".json")
    model_data.save(path)
    return path