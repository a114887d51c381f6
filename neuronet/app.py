"""Interactive terminal front end: menus, forms and training progress."""

from __future__ import annotations

import argparse
import os
import queue
import threading
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Sequence

from .activation import available_activations
from .dataset import Dataset
from .model_data import ModelData, load_model
from .workflow import (
    MODELS_DIRECTORY,
    TrainingConfig,
    WorkflowError,
    evaluate,
    find_csv_files,
    find_models,
    parse_training_config,
    predict,
    run_training,
    save_trained_model,
    select_model,
)

_NAV_KEYS = frozenset({"tab", "shift+tab", "enter", "up", "down"})
_BACK_KEYS = frozenset({"ctrl+c", "q"})
_NAMED_KEYS = frozenset(
    {"up", "down", "tab", "shift+tab", "enter", "backspace", "ctrl+c"}
)
_DEFAULT_EPOCHS = 1000
_FORM_HELP = "\n\n  ↑/↓, tab/shift+tab: navigate | enter: select | q: back\n"


class State(Enum):
    """The screen the application is showing."""

    MAIN_MENU = auto()
    TRAINING_FORM = auto()
    TRAINING_IN_PROGRESS = auto()
    EVALUATION = auto()
    PREDICTION_FORM = auto()
    PREDICTION_RESULT = auto()
    SAVE_MODEL_FORM = auto()
    ERROR = auto()


@dataclass
class _Field:
    placeholder: str
    char_limit: int
    value: str = ""


class Form:
    """Text fields followed by a button; one of them holds the focus."""

    def __init__(self, placeholders: Sequence[str], char_limit: int) -> None:
        self.fields = [_Field(placeholder, char_limit) for placeholder in placeholders]
        self.focus_index = 0

    @property
    def button_focused(self) -> bool:
        return self.focus_index == len(self.fields)

    def focus_next(self) -> None:
        """Move the focus forward, wrapping from the button to the first field."""
        self.focus_index += 1
        if self.focus_index > len(self.fields):
            self.focus_index = 0

    def focus_previous(self) -> None:
        """Move the focus back, wrapping from the first field to the button."""
        self.focus_index -= 1
        if self.focus_index < 0:
            self.focus_index = len(self.fields)

    def type_key(self, key: str) -> None:
        """Edit the focused field with a key press."""
        if self.button_focused:
            return
        current = self.fields[self.focus_index]
        if key == "backspace":
            current.value = current.value[:-1]
            return
        if len(key) != 1 or not key.isprintable():
            return
        if len(current.value) < current.char_limit:
            current.value += key

    def values(self) -> list[str]:
        """Return the text of every field."""
        return [f.value for f in self.fields]

    def render(self, index: int) -> str:
        current = self.fields[index]
        prefix = "> " if index == self.focus_index else "  "
        return prefix + (current.value or current.placeholder)

    def render_button(self, label: str) -> str:
        return ("> " if self.button_focused else "  ") + label


@dataclass
class _EpochCompleted:
    epoch: int
    loss: float


@dataclass
class _TrainingFinished:
    model_data: ModelData
    dataset: Dataset


@dataclass
class _Failed:
    error: Exception


class App:
    """Application state driven by key names such as "enter", "up" or "a"."""

    MENU_CHOICES = ("Train New Model", "Load Model & Predict", "Quit")

    def __init__(self, directory: str = ".", *, threaded: bool = True) -> None:
        self.directory = directory
        self.models_directory = os.path.join(directory, MODELS_DIRECTORY)
        self.threaded = threaded
        self.state = State.MAIN_MENU
        self.menu_cursor = 0
        self.training_form = Form(
            ["1", "20,20", "relu,relu", "linear", "1000", "0.001", "0.001"], 32
        )
        self.prediction_form = Form(
            ["1", "7.4,0.7,0,1.9,0.076,11,34,0.9978,3.51,0.56,9.4"], 128
        )
        self.save_form = Form(["my-awesome-model"], 64)
        self.csv_files: list[str] = []
        self.models: list[str] = []
        self.model_data: ModelData | None = None
        self.last_error: Exception | None = None
        self.quitting = False
        self.last_loss = 0.0
        self.current_epoch = 0
        self.total_epochs = 0
        self.prediction_value = 0.0
        self.prediction_class = ""
        self.accuracy = 0.0
        self._messages: queue.Queue[object] = queue.Queue()

    # key handling

    def handle_key(self, key: str) -> None:
        """React to one key press."""
        handlers = {
            State.MAIN_MENU: self._key_main_menu,
            State.TRAINING_FORM: self._key_training_form,
            State.TRAINING_IN_PROGRESS: self._key_training_in_progress,
            State.EVALUATION: self._key_evaluation,
            State.PREDICTION_FORM: self._key_prediction_form,
            State.PREDICTION_RESULT: self._key_return_to_menu,
            State.SAVE_MODEL_FORM: self._key_save_form,
            State.ERROR: self._key_return_to_menu,
        }
        handlers[self.state](key)

    def _key_main_menu(self, key: str) -> None:
        if key in _BACK_KEYS:
            self.quitting = True
        elif key in ("up", "k"):
            self.menu_cursor = max(self.menu_cursor - 1, 0)
        elif key in ("down", "j"):
            self.menu_cursor = min(self.menu_cursor + 1, len(self.MENU_CHOICES) - 1)
        elif key == "enter":
            if self.menu_cursor == 0:
                self.state = State.TRAINING_FORM
                self.csv_files = find_csv_files(self.directory)
            elif self.menu_cursor == 1:
                self.state = State.PREDICTION_FORM
                self.models = find_models(self.models_directory)
            else:
                self.quitting = True

    def _key_form(self, form: Form, key: str, submit) -> None:
        if key in _BACK_KEYS:
            self.state = State.MAIN_MENU
        elif key in _NAV_KEYS:
            if key == "enter" and form.button_focused:
                submit()
            elif key in ("up", "shift+tab"):
                form.focus_previous()
            else:
                form.focus_next()
        else:
            form.type_key(key)

    def _key_training_form(self, key: str) -> None:
        self._key_form(self.training_form, key, self._start_training)

    def _key_prediction_form(self, key: str) -> None:
        self._key_form(self.prediction_form, key, self._run_prediction)

    def _key_training_in_progress(self, key: str) -> None:
        if key == "q":
            self.state = State.MAIN_MENU

    def _key_evaluation(self, key: str) -> None:
        if key in ("enter", "q"):
            self.state = State.SAVE_MODEL_FORM

    def _key_return_to_menu(self, key: str) -> None:
        if key in ("enter", "q"):
            self.state = State.MAIN_MENU

    def _key_save_form(self, key: str) -> None:
        if key == "enter":
            name = self.save_form.values()[0]
            if self.model_data is not None:
                try:
                    save_trained_model(self.model_data, name, self.models_directory)
                except OSError as exc:
                    self._fail(exc)
                    return
            self.state = State.MAIN_MENU
        elif key in _BACK_KEYS:
            self.state = State.MAIN_MENU
        else:
            self.save_form.type_key(key)

    # actions

    def _fail(self, error: Exception) -> None:
        self.last_error = error
        self.state = State.ERROR

    def _start_training(self) -> None:
        try:
            config = parse_training_config(self.training_form.values(), self.csv_files)
        except WorkflowError as exc:
            self._fail(exc)
            return
        self.state = State.TRAINING_IN_PROGRESS
        self.total_epochs = config.epochs or _DEFAULT_EPOCHS
        self.current_epoch = 0
        self.last_loss = 0.0
        if self.threaded:
            threading.Thread(target=self._train, args=(config,), daemon=True).start()
        else:
            self._train(config)

    def _train(self, config: TrainingConfig) -> None:
        def report(epoch: int, loss: float) -> None:
            self._messages.put(_EpochCompleted(epoch, loss))

        try:
            model_data, dataset = run_training(config, report)
        except Exception as exc:  # reported on screen rather than lost in the thread
            self._messages.put(_Failed(exc))
        else:
            self._messages.put(_TrainingFinished(model_data, dataset))

    def _run_prediction(self) -> None:
        values = self.prediction_form.values()
        try:
            path = select_model(self.models, values[0])
            try:
                model_data = load_model(path)
            except (OSError, ValueError, TypeError, KeyError) as exc:
                raise WorkflowError(f"failed to load model: {exc}") from exc
            result = predict(model_data, values[1])
        except WorkflowError as exc:
            self._fail(exc)
            return
        if isinstance(result, str):
            self.prediction_class = result
        else:
            self.prediction_class = ""
            self.prediction_value = result
        self.state = State.PREDICTION_RESULT

    def poll(self) -> int:
        """Apply pending results from training; return how many were applied."""
        count = 0
        while True:
            try:
                message = self._messages.get_nowait()
            except queue.Empty:
                return count
            count += 1
            if isinstance(message, _EpochCompleted):
                self.current_epoch = message.epoch
                self.last_loss = message.loss
            elif isinstance(message, _TrainingFinished):
                self.model_data = message.model_data
                self.state = State.EVALUATION
                self.accuracy = evaluate(message.model_data, message.dataset)
                self.state = State.SAVE_MODEL_FORM
            elif isinstance(message, _Failed):
                self._fail(message.error)

    # rendering

    def view(self) -> str:
        """Render the current screen as text."""
        if self.quitting:
            return "Quitting...\n"
        views = {
            State.MAIN_MENU: self._view_main_menu,
            State.TRAINING_FORM: self._view_training_form,
            State.TRAINING_IN_PROGRESS: self._view_training_in_progress,
            State.EVALUATION: self._view_evaluation,
            State.PREDICTION_FORM: self._view_prediction_form,
            State.PREDICTION_RESULT: self._view_prediction_result,
            State.SAVE_MODEL_FORM: self._view_save_form,
            State.ERROR: self._view_error,
        }
        return views[self.state]()

    def _view_main_menu(self) -> str:
        lines = ["Neural Network", ""]
        for index, choice in enumerate(self.MENU_CHOICES):
            marker = "> " if index == self.menu_cursor else "  "
            lines.append(f"  {marker}{choice}")
        lines.append("")
        lines.append("  Use arrow keys to navigate, 'enter' to select, 'q' to quit.")
        return "\n".join(lines)

    def _view_training_form(self) -> str:
        form = self.training_form
        parts = ["Neural Network Training Configuration\n\n", "Available CSV Files:\n"]
        if not self.csv_files:
            parts.append("  (No CSV files found in current directory)\n")
        else:
            parts.extend(
                f"  {number}: {path}\n" for number, path in enumerate(self.csv_files, 1)
            )
        parts.append("\n")
        parts.append(f"Select CSV File (number): {form.render(0)}\n")
        parts.append(f"Hidden Layers (e.g., 20,20): {form.render(1)}\n")
        parts.append(
            f"\nAvailable activation functions: {', '.join(available_activations())}\n"
        )
        parts.append("Hint: 'relu' or 'tanh' are common choices for hidden layers.\n")
        parts.append(f"Hidden Activations (e.g., relu,relu): {form.render(2)}\n")
        parts.append("\nHint: 'linear' for regression, 'sigmoid' for classification.\n")
        parts.append(f"Output Activation: {form.render(3)}\n\n")
        parts.append(f"Epochs: {form.render(4)}\n")
        parts.append(f"Learning Rate: {form.render(5)}\n")
        parts.append(f"Error Goal: {form.render(6)}\n\n")
        parts.append(form.render_button("[ Start Training ]"))
        parts.append(_FORM_HELP)
        return "".join(parts)

    def _view_training_in_progress(self) -> str:
        return (
            "Training in progress...\n\n"
            f"Epoch: {self.current_epoch}/{self.total_epochs}\n"
            f"Loss: {self.last_loss:f}\n\n(Press 'q' to stop)"
        )

    def _view_evaluation(self) -> str:
        return (
            f"Evaluation complete!\n\nAccuracy: {self.accuracy * 100:.2f}%\n\n"
            "(Press enter to continue)"
        )

    def _view_prediction_form(self) -> str:
        form = self.prediction_form
        parts = ["Load Model & Predict\n\n", "Available Models:\n"]
        if not self.models:
            parts.append("  (No models found in saved_models/)\n")
        else:
            parts.extend(
                f"  {number}: {os.path.basename(path)}\n"
                for number, path in enumerate(self.models, 1)
            )
        parts.append("\n")
        parts.append(f"Select Model (number): {form.render(0)}\n")
        parts.append(f"Input Data (comma-separated): {form.render(1)}\n\n")
        parts.append(form.render_button("[ Predict ]"))
        parts.append(_FORM_HELP)
        return "".join(parts)

    def _view_prediction_result(self) -> str:
        result = self.prediction_class or f"{self.prediction_value:f}"
        return f"Prediction Result: {result}\n\n(Press enter to return to main menu)"

    def _view_save_form(self) -> str:
        return (
            "Training complete!\n\n"
            "Enter a name to save this model (or press Enter to skip):\n\n"
            f"{self.save_form.render(0)}\n\n  enter: save | q: skip"
        )

    def _view_error(self) -> str:
        return (
            f"An error occurred:\n\n{self.last_error}\n\n"
            "  Press enter or q to return to the main menu."
        )


def _keys_from_line(line: str) -> list[str]:
    if line == "":
        return ["enter"]
    if line in _NAMED_KEYS:
        return [line]
    return list(line)


def _follow_training(app: App) -> None:
    while app.state is State.TRAINING_IN_PROGRESS:
        try:
            print(
                f"\rEpoch: {app.current_epoch}/{app.total_epochs}  "
                f"Loss: {app.last_loss:f}",
                end="",
                flush=True,
            )
            time.sleep(0.1)
            app.poll()
        except KeyboardInterrupt:
            app.handle_key("q")
    print()


def _run(app: App) -> None:
    while not app.quitting:
        app.poll()
        if app.state is State.TRAINING_IN_PROGRESS:
            _follow_training(app)
            continue
        print(app.view())
        print("\n(empty line: enter; keys: up, down, tab, shift+tab, backspace)")
        try:
            line = input("> ")
        except EOFError:
            return
        except KeyboardInterrupt:
            line = "ctrl+c"
        for key in _keys_from_line(line):
            app.handle_key(key)
            if app.quitting:
                break
    print(app.view())


def main(argv: Sequence[str] | None = None) -> int:
    """Start the interactive application in the current directory."""
    parser = argparse.ArgumentParser(
        prog="neuronet",
        description="Train neural networks on CSV files and predict with saved models.",
    )
    parser.parse_args(argv)
    try:
        _run(App())
    except Exception as exc:
        print(f"Alas, there's been an error: {exc}")
        return 1
    return 0