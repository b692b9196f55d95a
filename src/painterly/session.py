"""Painting session: one canvas, its history, the outline, and submissions.

A submission runs as a single deferred unit of work on a one-thread
executor:

    generate layers → composite onto the canvas → push history → clear outline

submit() validates first and raises PaintingInputError with every message
when the form is invalid; nothing is scheduled in that case. A valid
submission returns a Future that resolves exactly once, with None, after the
history push.

Only one submission may be pending. While it is, pointer input, resize,
undo/redo and clear are ignored so the worker is the only writer of the
canvas. There is no cancellation.

Usage:
    session = PaintSession(width=320, height=320, seed=7)
    session.begin_stroke(10, 10); session.extend_stroke(200, 30); ...
    session.end_stroke()
    session.submit({"layers": "128", "alpha": "0.008", ...}).result()
    session.export_png("out/painting.png")
"""

import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Union

import numpy as np

from src.painterly import compositor
from src.painterly.form import FormResult, parse_form
from src.painterly.history import HistoryManager
from src.painterly.jitter import make_rng, make_sampler
from src.painterly.outline import DEFAULT_MIN_DISTANCE, OutlineRecorder, randomize_weights, scale_path
from src.painterly.raster import WHITE, RasterBuffer
from src.utils import fs
from src.utils.logging_config import pop_context, push_context
from src.utils.validators import PaintingConfigV1, PaintingRequest

logger = logging.getLogger(__name__)


class PaintingInputError(ValueError):
    """Submission rejected by validation.

    Attributes
    ----------
    messages : list of str
        Human-readable problems, in form order
    """

    def __init__(self, messages: Sequence[str]):
        self.messages = list(messages)
        super().__init__("\n".join(self.messages))


class SubmissionPendingError(RuntimeError):
    """A submission is already running on this session."""


class PaintSession:
    """Owns the canvas buffer, history and outline of one painting session.

    Parameters
    ----------
    width, height : int
        Initial canvas size (px)
    background : sequence of int
        Canvas background RGB
    min_distance : float
        Outline point spacing (px)
    jitter : str
        Jitter policy, "uniform" or "gaussian"
    seed : int, optional
        Seed for the session random source; None uses OS entropy
    """

    def __init__(
        self,
        width: int = 320,
        height: int = 320,
        *,
        background: Sequence[int] = WHITE,
        min_distance: float = DEFAULT_MIN_DISTANCE,
        jitter: str = "uniform",
        seed: Optional[int] = None
    ):
        self.buffer = RasterBuffer(width, height, background)
        self.history = HistoryManager(self.buffer)
        self.outline = OutlineRecorder(min_distance)
        self.rng = make_rng(seed)
        self.sampler = make_sampler(jitter, self.rng)

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="paint")
        self._lock = threading.Lock()
        self._pending: Optional[Future] = None
        self._counter = itertools.count(1)

        logger.info(
            f"PaintSession initialized: canvas={width}x{height}, jitter={jitter}, "
            f"seed={seed if seed is not None else 'entropy'}"
        )

    @classmethod
    def from_config(cls, cfg: PaintingConfigV1) -> "PaintSession":
        """Build a session from a validated painting.v1 config."""
        return cls(
            cfg.canvas.width,
            cfg.canvas.height,
            background=cfg.background_rgb,
            min_distance=cfg.capture.min_distance,
            jitter=cfg.randomness.policy,
            seed=cfg.randomness.seed,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None and not self._pending.done()

    @property
    def size(self):
        return self.buffer.size

    @property
    def path(self) -> List:
        return list(self.outline.points)

    def _ignored(self, what: str) -> bool:
        if self.pending:
            logger.debug(f"{what} ignored: a submission is pending")
            return True
        return False

    # ------------------------------------------------------------------
    # Outline capture
    # ------------------------------------------------------------------

    def begin_stroke(self, x: float, y: float) -> None:
        if self._ignored("Pointer down"):
            return
        self.outline.begin(x, y)

    def extend_stroke(self, x: float, y: float) -> bool:
        if self._ignored("Pointer move"):
            return False
        return self.outline.extend(x, y)

    def end_stroke(self) -> List:
        if self._ignored("Pointer up"):
            return self.path
        return self.outline.finish()

    def set_outline(self, points: Sequence[Sequence[float]], close: bool = True) -> List:
        """Replace the outline with externally captured points."""
        if self._ignored("Outline update"):
            return self.path
        self.outline.clear()
        self.outline.points = [(float(p[0]), float(p[1])) for p in points]
        if close:
            return self.outline.finish()
        return list(self.outline.points)

    # ------------------------------------------------------------------
    # Canvas operations
    # ------------------------------------------------------------------

    def resize(self, width: int, height: int, scale_outline: bool = False) -> bool:
        """Resize the canvas, keeping its content at the origin."""
        if self._ignored("Resize"):
            return False
        old_w, old_h = self.buffer.size
        self.buffer.resize(width, height)
        if scale_outline and self.outline.points:
            scaled = scale_path(self.outline.points, width / old_w, height / old_h)
            self.outline.points = [(float(x), float(y)) for x, y in scaled]
        return True

    def clear(self) -> bool:
        """Clear the canvas to background and drop all history."""
        if self._ignored("Clear"):
            return False
        self.buffer.clear()
        self.history.clear()
        return True

    def undo(self) -> bool:
        if self._ignored("Undo"):
            return False
        return self.history.undo()

    def redo(self) -> bool:
        if self._ignored("Redo"):
            return False
        return self.history.redo()

    def export_png(self, path: Union[str, Path]) -> Path:
        """Write the canvas to a PNG file atomically."""
        path = Path(path)
        fs.atomic_save_image(self.buffer.pixels, path)
        logger.info(f"Canvas exported to {path}")
        return path

    def to_png_bytes(self) -> bytes:
        return fs.encode_png(self.buffer.pixels)

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def validate(self, fields: Mapping[str, Optional[str]]) -> FormResult:
        return parse_form(
            fields,
            path_length=len(self.outline.points),
            width=self.buffer.width,
            height=self.buffer.height,
        )

    def submit(self, fields: Mapping[str, Optional[str]]) -> Future:
        """Validate form fields and schedule one painting pass.

        Parameters
        ----------
        fields : mapping of str → str
            Raw form values (see src.painterly.form)

        Returns
        -------
        Future
            Resolves with None once compositing and the history push finish

        Raises
        ------
        SubmissionPendingError
            If a previous submission has not finished
        PaintingInputError
            If validation fails; nothing is scheduled
        """
        with self._lock:
            if self._pending is not None and not self._pending.done():
                raise SubmissionPendingError("A painting submission is already pending")

            result = self.validate(fields)
            if not result.ok:
                logger.info(f"Submission rejected: {len(result.errors)} validation error(s)")
                raise PaintingInputError(result.errors)

            number = next(self._counter)
            path = randomize_weights(self.outline.points, self.rng)
            self._pending = self._executor.submit(self._run, number, path, result.request)
            logger.info(f"Submission {number} queued ({len(path)} outline points)")
            return self._pending

    def _run(self, number: int, path: np.ndarray, request: PaintingRequest) -> None:
        push_context(submission=number)
        try:
            compositor.paint_path(
                self.buffer,
                path,
                request.generation,
                request.render,
                self.sampler,
                self.rng,
            )
            self.history.push()
            self.outline.clear()
            logger.info(f"Submission {number} complete (history {self.history.cursor}/{len(self.history)})")
        finally:
            pop_context(keys=["submission"])

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the pending submission (if any) finishes."""
        with self._lock:
            pending = self._pending
        if pending is not None:
            pending.result(timeout)

    def close(self) -> None:
        """Finish pending work and release the worker thread."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "PaintSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
