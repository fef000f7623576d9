"""Split work along the element axis between threads.

Every element is processed independently, so the element range can be cut into contiguous chunks
that are handed to separate workers. Numpy releases the GIL inside its array kernels, which lets threads
overlap on large chunks.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List

__all__ = ["element_chunks", "for_each_element_chunk"]


def element_chunks(num_elements: int, num_chunks: int) -> List[slice]:
    """Cut [0, num_elements) into at most `num_chunks` contiguous, non-empty slices of nearly equal size."""
    if num_chunks < 1:
        raise ValueError(f"Need at least one chunk, got {num_chunks}")

    num_chunks = min(num_chunks, max(num_elements, 1))
    base, extra = divmod(num_elements, num_chunks)

    chunks = []
    start = 0
    for c in range(num_chunks):
        stop = start + base + (1 if c < extra else 0)
        chunks.append(slice(start, stop))
        start = stop
    return chunks


def for_each_element_chunk(work: Callable[[slice], None], num_elements: int, num_workers: int = 1) -> None:
    """Call `work(chunk)` for every element chunk and wait until all of them are done.

    With a single worker, `work` is called once on the full range, in the calling thread. Otherwise the
    chunks are processed by a thread pool; the first exception raised by a worker is re-raised here, after
    all workers have joined.
    """
    if num_workers <= 1 or num_elements <= 1:
        work(slice(0, num_elements))
        return

    chunks = element_chunks(num_elements, num_workers)
    with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
        futures = [executor.submit(work, chunk) for chunk in chunks]

    for future in futures:
        future.result()
