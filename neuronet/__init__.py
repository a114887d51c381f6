"""A small multi-layer perceptron with CSV data loading, model storage and a terminal front end."""

__version__ = "0.1.0"