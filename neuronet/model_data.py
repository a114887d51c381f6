"""A trained network together with the scaling needed to use it."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .network import NeuralNetwork


@dataclass
class ModelData:
    """A network plus input ranges, target ranges and class names."""

    nn: NeuralNetwork
    input_mins: list[float]
    input_maxs: list[float]
    target_mins: list[float] = field(default_factory=list)
    target_maxs: list[float] = field(default_factory=list)
    class_map: dict[str, int] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping; empty optional fields are left out."""
        data: dict[str, Any] = {
            "neuralNetwork": self.nn.to_dict(),
            "inputMins": list(self.input_mins),
            "inputMaxs": list(self.input_maxs),
        }
        if self.target_mins:
            data["targetMins"] = list(self.target_mins)
        if self.target_maxs:
            data["targetMaxs"] = list(self.target_maxs)
        if self.class_map:
            data["classMap"] = dict(self.class_map)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModelData:
        """Build model data from a mapping made by :meth:`to_dict`."""
        if not isinstance(data, dict):
            raise ValueError("model data must be a JSON object")
        network = data.get("neuralNetwork")
        if not isinstance(network, dict):
            raise ValueError("model data has no neural network")
        class_map = data.get("classMap")
        return cls(
            nn=NeuralNetwork.from_dict(network),
            input_mins=[float(v) for v in data.get("inputMins") or []],
            input_maxs=[float(v) for v in data.get("inputMaxs") or []],
            target_mins=[float(v) for v in data.get("targetMins") or []],
            target_maxs=[float(v) for v in data.get("targetMaxs") or []],
            class_map=(
                None
                if class_map is None
                else {str(name): int(index) for name, index in class_map.items()}
            ),
        )

    def save(self, file_path: str) -> None:
        """Write the model to ``file_path`` as indented JSON."""
        with open(file_path, "w", encoding="utf-8") as handle:
            json.dump(self.to_dict(), handle, indent=2)
            handle.write("\n")


def load_model(file_path: str) -> ModelData:
    """Read model data written by :meth:`ModelData.save`."""
    with open(file_path, encoding="utf-8") as handle:
        return ModelData.from_dict(json.load(handle))