"""A fully connected multi-layer perceptron trained by backpropagation."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from .activation import Activation, get_activation

Vector = list[float]
Matrix = list[list[float]]


def _dot(values: Iterable[float], weights: Iterable[float]) -> float:
    return sum((v * w for v, w in zip(values, weights)), 0.0)


def _apply_update(
    weights: Matrix,
    biases: Vector,
    deltas: Sequence[float],
    previous: Sequence[float],
    learning_rate: float,
) -> None:
    for j, (row, delta) in enumerate(zip(weights, deltas)):
        for k, value in enumerate(previous):
            row[k] += learning_rate * delta * value
        biases[j] += learning_rate * delta


@dataclass
class NeuralNetwork:
    """Weights, biases and activation names of a multi-layer perceptron."""

    num_inputs: int
    hidden_layers: list[int]
    num_outputs: int
    hidden_weights: list[Matrix]
    output_weights: Matrix
    hidden_biases: list[Vector]
    output_biases: Vector
    hidden_activations: list[str]
    output_activation: str
    _hidden_funcs: list[Activation] | None = field(
        default=None, init=False, repr=False, compare=False
    )
    _output_func: Activation | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def set_activation_functions(self) -> None:
        """Resolve the activation names; raise ValueError for an unknown one."""
        hidden = [get_activation(name) for name in self.hidden_activations]
        output = get_activation(self.output_activation)
        self._hidden_funcs = hidden
        self._output_func = output

    def _functions(self) -> tuple[list[Activation], Activation]:
        if self._hidden_funcs is None or self._output_func is None:
            self.set_activation_functions()
        assert self._hidden_funcs is not None and self._output_func is not None
        return self._hidden_funcs, self._output_func

    def feed_forward(self, inputs: Sequence[float]) -> tuple[list[Vector], Vector]:
        """Return the outputs of every hidden layer and of the output layer."""
        hidden_funcs, output_func = self._functions()
        hidden_outputs: list[Vector] = []
        layer_input: Sequence[float] = inputs
        for weights, biases, func in zip(
            self.hidden_weights, self.hidden_biases, hidden_funcs, strict=True
        ):
            layer_output = [
                func.activate(_dot(layer_input, row) + bias)
                for row, bias in zip(weights, biases)
            ]
            hidden_outputs.append(layer_output)
            layer_input = layer_output

        final_outputs = [
            output_func.activate(_dot(layer_input, row) + bias)
            for row, bias in zip(self.output_weights, self.output_biases)
        ]
        return hidden_outputs, final_outputs

    def backpropagate(
        self,
        inputs: Sequence[float],
        targets: Sequence[float],
        hidden_outputs: Sequence[Sequence[float]],
        final_outputs: Sequence[float],
        learning_rate: float,
    ) -> None:
        """Adjust weights and biases towards the targets for one sample."""
        if not self.hidden_layers:
            raise ValueError("backpropagation requires at least one hidden layer")
        hidden_funcs, output_func = self._functions()

        output_deltas = [
            (target - output) * output_func.derivative(output)
            for target, output in zip(targets, final_outputs)
        ]

        layer_count = len(self.hidden_layers)
        hidden_deltas: list[Vector] = [[] for _ in range(layer_count)]
        next_deltas: Sequence[float] = output_deltas
        next_weights: Matrix = self.output_weights
        for i in reversed(range(layer_count)):
            func = hidden_funcs[i]
            hidden_deltas[i] = [
                _dot(next_deltas, column) * func.derivative(output)
                for column, output in zip(zip(*next_weights), hidden_outputs[i])
            ]
            next_deltas = hidden_deltas[i]
            next_weights = self.hidden_weights[i]

        _apply_update(
            self.output_weights,
            self.output_biases,
            output_deltas,
            hidden_outputs[-1],
            learning_rate,
        )
        for i in reversed(range(layer_count)):
            previous = inputs if i == 0 else hidden_outputs[i - 1]
            _apply_update(
                self.hidden_weights[i],
                self.hidden_biases[i],
                hidden_deltas[i],
                previous,
                learning_rate,
            )

    def train(
        self,
        inputs: Sequence[Sequence[float]],
        targets: Sequence[Sequence[float]],
        epochs: int,
        learning_rate: float,
        error_goal: float,
        on_epoch: Callable[[float], Any] | None = None,
    ) -> list[float]:
        """Train for up to ``epochs`` passes; stop once the mean error is below the goal.

        ``on_epoch`` receives the mean error after each epoch. The list of
        those errors is returned.
        """
        history: list[float] = []
        for _ in range(epochs):
            total_error = 0.0
            for sample, target in zip(inputs, targets):
                hidden_outputs, final_outputs = self.feed_forward(sample)
                self.backpropagate(
                    sample, target, hidden_outputs, final_outputs, learning_rate
                )
                for expected, actual in zip(target, final_outputs):
                    total_error += 0.5 * (expected - actual) * (expected - actual)
            avg_error = total_error / len(inputs) if inputs else math.nan

            history.append(avg_error)
            if on_epoch is not None:
                on_epoch(avg_error)
            if avg_error < error_goal:
                break
        return history

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of the network."""
        return {
            "numInputs": self.num_inputs,
            "hiddenLayers": list(self.hidden_layers),
            "numOutputs": self.num_outputs,
            "hiddenWeights": [[list(row) for row in layer] for layer in self.hidden_weights],
            "outputWeights": [list(row) for row in self.output_weights],
            "hiddenBiases": [list(layer) for layer in self.hidden_biases],
            "outputBiases": list(self.output_biases),
            "hiddenActivations": list(self.hidden_activations),
            "outputActivation": self.output_activation,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NeuralNetwork:
        """Build a network from a mapping made by :meth:`to_dict`."""
        return cls(
            num_inputs=int(data.get("numInputs", 0)),
            hidden_layers=[int(n) for n in data.get("hiddenLayers") or []],
            num_outputs=int(data.get("numOutputs", 0)),
            hidden_weights=[
                [[float(w) for w in row] for row in layer]
                for layer in data.get("hiddenWeights") or []
            ],
            output_weights=[
                [float(w) for w in row] for row in data.get("outputWeights") or []
            ],
            hidden_biases=[
                [float(b) for b in layer] for layer in data.get("hiddenBiases") or []
            ],
            output_biases=[float(b) for b in data.get("outputBiases") or []],
            hidden_activations=list(data.get("hiddenActivations") or []),
            output_activation=data.get("outputActivation", ""),
        )


def init_network(
    inputs: int,
    hidden_layers: Sequence[int],
    outputs: int,
    hidden_activations: Sequence[str],
    output_activation: str,
) -> NeuralNetwork:
    """Create a network with He-initialised weights and zero biases."""
    hidden_weights: list[Matrix] = []
    hidden_biases: list[Vector] = []
    prev_size = inputs
    for layer_size in hidden_layers:
        scale = math.sqrt(2.0 / prev_size)
        hidden_weights.append(
            [[random.gauss(0.0, 1.0) * scale for _ in range(prev_size)] for _ in range(layer_size)]
        )
        hidden_biases.append([0.0] * layer_size)
        prev_size = layer_size

    scale = math.sqrt(2.0 / prev_size)
    output_weights = [
        [random.gauss(0.0, 1.0) * scale for _ in range(prev_size)] for _ in range(outputs)
    ]

    network = NeuralNetwork(
        num_inputs=inputs,
        hidden_layers=list(hidden_layers),
        num_outputs=outputs,
        hidden_weights=hidden_weights,
        output_weights=output_weights,
        hidden_biases=hidden_biases,
        output_biases=[0.0] * outputs,
        hidden_activations=list(hidden_activations),
        output_activation=output_activation,
    )
    network.set_activation_functions()
    return network