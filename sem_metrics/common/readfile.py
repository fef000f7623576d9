def readfile(filename: str) -> str:
    """Return the entire content of the given text file as a single string."""
    with open(filename) as f:
        return f.read()
