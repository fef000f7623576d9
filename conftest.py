# Having a conftest.py at the project root puts the root on sys.path when running pytest, so that the test
# modules can import shared helpers as `tests.unit...`, the same way tests/run_tests.py does.
