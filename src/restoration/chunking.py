"""
Chunked processing of local operations (convolution, versine, smoothing).

A local operation only reads samples within ``halo`` of the output index,
so a chunk computed on a slice widened by the halo on both sides gives the
same values as whole-series processing. Chunks write disjoint ranges of the
output; progress is reported and cancellation is checked between chunks.
"""

import math
from typing import Callable, Optional

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from restoration.errors import InvalidInput, ProcessingCancelled


class ChunkProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    current: int = Field(..., ge=0, description="Samples finished")
    total: int = Field(..., ge=0)
    chunk: int = Field(..., ge=0, description="Chunks finished")
    chunks: int = Field(..., ge=0)
    message: str = ""

    @property
    def percentage(self) -> int:
        return round(100 * self.current / self.total) if self.total > 0 else 100


ProgressCallback = Callable[[ChunkProgress], None]
CancelCheck = Callable[[], bool]


def chunk_count(total: int, chunk_size: Optional[int]) -> int:
    if total == 0:
        return 0
    if chunk_size is None or chunk_size >= total:
        return 1
    return math.ceil(total / chunk_size)


def process_chunked(
    values,
    func: Callable[[np.ndarray], np.ndarray],
    halo: int,
    chunk_size: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancelCheck] = None,
    label: str = "chunk",
) -> np.ndarray:
    """
    Apply ``func`` (same-length local operation) to ``values``.

    :param halo: number of samples ``func`` reads on each side of an output sample
    :param chunk_size: samples per chunk; None processes the whole series at once
    :param progress: called with a :class:`ChunkProgress` after every chunk
    :param cancel: polled before every chunk; returning True raises ProcessingCancelled
    """
    values = np.asarray(values, dtype=float)
    total = len(values)
    if halo < 0:
        raise InvalidInput("halo must be non-negative", "halo", halo)
    if chunk_size is not None and chunk_size <= 0:
        raise InvalidInput("chunk_size must be positive", "chunk_size", chunk_size)

    chunks = chunk_count(total, chunk_size)
    step = total if chunks <= 1 else chunk_size
    out = np.empty(total)

    for index in range(chunks):
        if cancel is not None and cancel():
            raise ProcessingCancelled(f"{label} cancelled after {index}/{chunks} chunks", "chunk", index)

        start = index * step
        stop = min(start + step, total)
        lo = max(0, start - halo)
        hi = min(total, stop + halo)

        part = np.asarray(func(values[lo:hi]), dtype=float)
        if part.shape != (hi - lo,):
            raise InvalidInput(f"{label} operation changed the slice length", "func", part.shape)
        out[start:stop] = part[start - lo : stop - lo]

        if chunks > 1:
            logger.debug(f"{label}: chunk {index + 1}/{chunks} [{start}, {stop})")
        if progress is not None:
            progress(
                ChunkProgress(
                    current=stop,
                    total=total,
                    chunk=index + 1,
                    chunks=chunks,
                    message=f"Processing {label} {index + 1}/{chunks}",
                )
            )

    return out


def edge_mask(total: int, before: int, after: Optional[int] = None) -> np.ndarray:
    """Flags the first ``before`` and last ``after`` samples (zero-padded region)."""
    after = before if after is None else after
    mask = np.zeros(total, dtype=bool)
    mask[: min(before, total)] = True
    if after > 0:
        mask[max(0, total - after) :] = True
    return mask
