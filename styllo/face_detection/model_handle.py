"""Lazy, load-once ownership of a face detection model."""

import logging
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Any, Callable, Optional

from styllo.utils.exceptions import FaceModelError


class ModelState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ModelHandle:
    """
    Holds a model produced by ``loader`` and loads it at most once.

    ``ensure_ready()`` is safe to call from several threads: the first caller
    runs the loader, the others wait on the same future. A waiter whose
    ``timeout`` expires gets ``concurrent.futures.TimeoutError`` and the load
    carries on. A failed load is remembered and re-raised as FaceModelError
    until ``reset()`` is called.
    """

    def __init__(self, loader: Callable[[], Any], name: str = "face-model"):
        self.loader = loader
        self.name = name
        self.logger = logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._future: Optional[Future] = None
        self._state = ModelState.UNINITIALIZED

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ModelState.READY

    def ensure_ready(self, timeout: Optional[float] = None) -> Any:
        """Return the loaded model, loading it on first use"""
        with self._lock:
            future = self._future
            owner = future is None
            if owner:
                future = Future()
                self._future = future
                self._state = ModelState.LOADING

        if owner:
            self._load_into(future)

        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as e:
            if not future.done():
                # still loading; the caller may wait again
                raise
            raise FaceModelError(f"Failed to load {self.name}: {e}") from e
        except FaceModelError:
            raise
        except Exception as e:
            raise FaceModelError(f"Failed to load {self.name}: {e}") from e

    def _load_into(self, future: Future):
        self.logger.info(f"Loading {self.name}...")
        try:
            model = self.loader()
        except Exception as e:
            self._state = ModelState.FAILED
            self.logger.error(f"Loading {self.name} failed: {e}")
            future.set_exception(e)
            return
        self._state = ModelState.READY
        self.logger.info(f"{self.name} loaded")
        future.set_result(model)

    def reset(self):
        """Forget the loaded (or failed) model so the next call loads again"""
        with self._lock:
            self._future = None
            self._state = ModelState.UNINITIALIZED
