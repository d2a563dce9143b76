"""
One-shot asynchronous model loading.

The model is loaded on a background worker once at startup.  The frame
loop polls ``ModelLoader.ready`` every frame instead of waiting, so the
animation keeps running (with the arm frozen) until the model arrives.

Classes:
    ModelLoader: Future-backed loader with a non-blocking readiness flag.

Functions:
    build_model_factory: Return the load callable for a backend name.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from typing import Callable, Dict, Optional, Tuple

from armreach_sim.inference.models import AnalyticIKModel, AngleModel, MLPAngleModel
from armreach_sim.utils.constants import DEFAULT_MODEL_PATH, LINK_LENGTHS

logger = logging.getLogger(__name__)


class ModelLoader:
    """Loads an ``AngleModel`` once, off the frame loop.

    Attributes:
        name: Human-readable description used in log messages.
    """

    def __init__(self, load_fn: Callable[[], AngleModel], name: str = "model") -> None:
        """Initialise the loader without starting it.

        Args:
            load_fn: Callable returning the loaded model.
            name: Description of the model resource for logs.
        """
        self.name = name
        self._load_fn = load_fn
        self._future: Optional[Future] = None

    @classmethod
    def from_model(cls, model: AngleModel, name: str = "in-memory model") -> "ModelLoader":
        """Return a loader that is already ready with *model*."""
        loader = cls(lambda: model, name=name)
        future: Future = Future()
        future.set_result(model)
        loader._future = future
        return loader

    def start(self) -> "ModelLoader":
        """Submit the load to a background worker (once).

        Returns:
            *self*, for chaining.
        """
        if self._future is not None:
            return self
        logger.info("Loading %s", self.name)
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="armreach-load")
        self._future = executor.submit(self._load_fn)
        self._future.add_done_callback(self._log_outcome)
        executor.shutdown(wait=False)
        return self

    def _log_outcome(self, future: Future) -> None:
        """Report the load result once it is known."""
        error = future.exception()
        if error is not None:
            logger.error("Failed to load %s: %s", self.name, error)
        else:
            logger.info("Model loaded: %s", self.name)

    @property
    def started(self) -> bool:
        return self._future is not None

    @property
    def ready(self) -> bool:
        """True once the load has completed successfully.  Never blocks."""
        future = self._future
        if future is None or not future.done() or future.cancelled():
            return False
        return future.exception() is None

    @property
    def failed(self) -> bool:
        """True when the load finished with an error."""
        future = self._future
        if future is None or not future.done() or future.cancelled():
            return False
        return future.exception() is not None

    @property
    def model(self) -> AngleModel:
        """The loaded model.

        Raises:
            RuntimeError: If the model is not ready.
        """
        if not self.ready:
            raise RuntimeError(f"{self.name} is not loaded yet")
        return self._future.result()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the load finishes or *timeout* elapses.

        Returns:
            The value of ``ready`` afterwards.
        """
        if self._future is not None:
            wait_futures([self._future], timeout=timeout)
        return self.ready


def build_model_factory(
    backend: str,
    model_path: str = DEFAULT_MODEL_PATH,
    link_lengths: Tuple[float, float] = LINK_LENGTHS,
) -> Callable[[], AngleModel]:
    """Return the callable that loads the model for *backend*.

    Args:
        backend: ``'mlp'`` or ``'analytic'``.
        model_path: ``.npz`` resource read by the MLP backend.
        link_lengths: Link lengths for the analytic backend.

    Returns:
        Zero-argument callable producing an ``AngleModel``.

    Raises:
        ValueError: If the backend name is not recognised.
    """
    registry: Dict[str, Callable[[], AngleModel]] = {
        "mlp": lambda: MLPAngleModel.load(model_path),
        "analytic": lambda: AnalyticIKModel(link_lengths),
    }
    if backend not in registry:
        raise ValueError(f"Unknown backend '{backend}'. Choose from {list(registry)}")
    return registry[backend]
