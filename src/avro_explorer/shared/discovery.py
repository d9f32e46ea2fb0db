import glob
from pathlib import Path
from typing import Iterable, List


def expand_paths(patterns: Iterable[str]) -> List[Path]:
    """
    Turn file arguments into a de-duplicated list of files.

    Each argument is either an existing file or a glob pattern (``**`` is
    recursive). Matches of one pattern are sorted; argument order is kept.
    """
    seen = set()
    files = []
    for pattern in patterns:
        path = Path(pattern)
        if path.is_file():
            matches = [path]
        else:
            matches = sorted(Path(p) for p in glob.glob(pattern, recursive=True))
        for p in matches:
            if not p.is_file():
                continue
            key = p.resolve()
            if key not in seen:
                seen.add(key)
                files.append(p)
    return files
