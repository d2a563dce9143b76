from __future__ import annotations

import threading
from typing import List

import numpy as np
import pytest

from armreach_sim.control.target_state import TargetState
from armreach_sim.inference.loader import ModelLoader
from armreach_sim.inference.models import AngleModel
from armreach_sim.robots.arm_rig import ArmRig


class RecordingModel(AngleModel):
    """Returns fixed angles and remembers every input it was given."""

    def __init__(self, angles=(0.2, -0.2, 0.1, 0.0)) -> None:
        self.angles = np.array([angles], dtype=np.float32)
        self.calls: List[list] = []

    def predict(self, inputs: np.ndarray) -> np.ndarray:
        self.calls.append(np.asarray(inputs).tolist())
        return self.angles.copy()


class FailingModel(AngleModel):
    def __init__(self) -> None:
        self.calls = 0

    def predict(self, inputs: np.ndarray) -> np.ndarray:
        self.calls += 1
        raise RuntimeError("model exploded")


class GatedModel(RecordingModel):
    """Blocks inside ``predict`` until ``gate`` is set."""

    def __init__(self, angles=(0.2, -0.2, 0.1, 0.0)) -> None:
        super().__init__(angles)
        self.gate = threading.Event()

    def predict(self, inputs: np.ndarray) -> np.ndarray:
        self.gate.wait(timeout=5.0)
        return super().predict(inputs)


@pytest.fixture
def recording_model() -> RecordingModel:
    return RecordingModel()


@pytest.fixture
def target() -> TargetState:
    return TargetState()


@pytest.fixture
def rig() -> ArmRig:
    return ArmRig()


@pytest.fixture
def ready_loader(recording_model: RecordingModel) -> ModelLoader:
    return ModelLoader.from_model(recording_model)
