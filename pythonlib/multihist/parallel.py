from __future__ import annotations
import multiprocessing as mp
from typing import List

import numpy as np
from tqdm import tqdm

from .errors import InvalidArgument
from .histogram import Histogram
from .merging.merge import merge


def _slice(x, sl):
    if x is None or np.ndim(x) == 0:
        return x
    return np.asarray(x)[sl]


def _worker_fill(args) -> Histogram:
    template, columns, weight, sample = args
    part = template.copy()
    part.fill_many(*columns, weight=weight, sample=sample)
    return part


def fill_parallel(
    h: Histogram,
    *columns,
    weight=None,
    sample=None,
    nproc: int | None = None,
    chunk_size: int | None = None,
    progress: bool = False,
) -> Histogram:
    """
    Fill ``h`` from columns of data by filling empty copies and merging them.

    With ``nproc`` greater than one the chunks are filled in a process pool;
    otherwise they are filled in this process. ``h`` is only modified once
    every chunk has been filled, so an error leaves it untouched.
    """
    arrs = [np.asarray(c) for c in columns]
    if not arrs:
        raise InvalidArgument("fill_parallel: no columns given")
    n = len(arrs[0])
    if any(len(a) != n for a in arrs):
        raise InvalidArgument("arrays must have equal length")

    template = h.copy()
    template.reset()

    workers = max(nproc or 1, 1)
    if chunk_size is None:
        chunk_size = max(-(-n // workers), 1)
    if chunk_size <= 0:
        raise InvalidArgument("chunk_size must be positive")

    jobs = []
    for start in range(0, n, chunk_size):
        sl = slice(start, start + chunk_size)
        jobs.append(
            (template, [a[sl] for a in arrs], _slice(weight, sl), _slice(sample, sl))
        )
    if not jobs:
        return h

    if workers <= 1:
        parts: List[Histogram] = [
            _worker_fill(j) for j in tqdm(jobs, disable=not progress)
        ]
    else:
        with mp.Pool(processes=workers) as pool:
            parts = list(
                tqdm(
                    pool.imap(_worker_fill, jobs),
                    total=len(jobs),
                    disable=not progress,
                )
            )

    h += merge(parts)
    return h
