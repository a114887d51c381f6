"""Activation functions used by the network layers."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod


class Activation(ABC):
    """An activation function and its derivative."""

    @abstractmethod
    def activate(self, x: float) -> float:
        """Apply the function to a weighted sum."""

    @abstractmethod
    def derivative(self, x: float) -> float:
        """Return the derivative, given the already activated value."""


class ReLU(Activation):
    """Rectified linear unit."""

    def activate(self, x: float) -> float:
        return x if x > 0 else 0.0

    def derivative(self, x: float) -> float:
        return 1.0 if x > 0 else 0.0


class Sigmoid(Activation):
    """Logistic sigmoid."""

    def activate(self, x: float) -> float:
        try:
            return 1.0 / (1.0 + math.exp(-x))
        except OverflowError:
            return 0.0

    def derivative(self, x: float) -> float:
        # x is the sigmoid output, not its input.
        return x * (1.0 - x)


class Tanh(Activation):
    """Hyperbolic tangent."""

    def activate(self, x: float) -> float:
        return math.tanh(x)

    def derivative(self, x: float) -> float:
        # x is the tanh output, not its input.
        return 1.0 - x * x


class Linear(Activation):
    """Identity function."""

    def activate(self, x: float) -> float:
        return x

    def derivative(self, x: float) -> float:
        return 1.0


_ACTIVATIONS: dict[str, Activation] = {
    "relu": ReLU(),
    "sigmoid": Sigmoid(),
    "tanh": Tanh(),
    "linear": Linear(),
}


def get_activation(name: str) -> Activation:
    """Return the activation function registered under ``name``."""
    try:
        return _ACTIVATIONS[name]
    except KeyError:
        raise ValueError(f"unknown activation function: {name}") from None


def available_activations() -> list[str]:
    """Return the names of all activation functions, sorted."""
    return sorted(_ACTIVATIONS)