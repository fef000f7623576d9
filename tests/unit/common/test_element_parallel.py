import threading
import unittest

from sem_metrics.common import element_chunks, for_each_element_chunk


class ElementParallelTestCases(unittest.TestCase):
    def test_chunks_cover_all_elements(self):
        for nelem in [1, 2, 7, 64]:
            for num_chunks in [1, 3, 8, 100]:
                chunks = element_chunks(nelem, num_chunks)
                self.assertLessEqual(len(chunks), num_chunks)
                self.assertEqual(chunks[0].start, 0)
                self.assertEqual(chunks[-1].stop, nelem)
                for before, after in zip(chunks[:-1], chunks[1:]):
                    self.assertEqual(before.stop, after.start)

                sizes = [c.stop - c.start for c in chunks]
                self.assertGreaterEqual(min(sizes), 1)
                self.assertLessEqual(max(sizes) - min(sizes), 1)

        with self.assertRaises(ValueError):
            element_chunks(10, 0)

    def test_single_worker_runs_in_calling_thread(self):
        calls = []
        for_each_element_chunk(lambda e: calls.append((e, threading.current_thread())), 10, num_workers=1)
        self.assertEqual(calls, [(slice(0, 10), threading.current_thread())])

    def test_every_element_processed_once(self):
        seen = []
        lock = threading.Lock()

        def work(e: slice):
            with lock:
                seen.extend(range(e.start, e.stop))

        for_each_element_chunk(work, 23, num_workers=4)
        self.assertListEqual(sorted(seen), list(range(23)))

    def test_worker_exception_is_raised(self):
        def work(e: slice):
            if e.start > 0:
                raise RuntimeError(f"Failed on {e}")

        with self.assertRaises(RuntimeError):
            for_each_element_chunk(work, 8, num_workers=2)


if __name__ == "__main__":
    unittest.main()
