from __future__ import annotations

"""Fail-fast grep to keep host clock reads out of engine code.

Engine operations receive `now` from the caller. The only module allowed to read
the host clock is game_time.py (utc_now), used by the API layer when the client
does not supply a timestamp.

Run:
  python -m tools.check_no_os_time

Exit code:
  0 - clean
  1 - forbidden pattern found
"""

import os
import re
from pathlib import Path


FORBIDDEN_PATTERNS = [
    r"\bdate\.today\s*\(",
    r"\bdatetime\.now\s*\(",
    r"\bdatetime\.utcnow\s*\(",
    r"\b_dt\.datetime\.now\s*\(",
    r"\b_dt\.datetime\.utcnow\s*\(",
    r"\btime\.time\s*\(",
    r"\btime\.monotonic\s*\(",
]

EXCLUDE_DIRS = {
    ".git",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    "tests",
}

EXCLUDE_FILES = {
    "game_time.py",
    "check_no_os_time.py",
}


def iter_py_files(root: Path):
    for dirpath, dirnames, filenames in os.walk(root):
        dn = Path(dirpath)
        dirnames[:] = [d for d in dirnames if d not in EXCLUDE_DIRS]
        for fn in filenames:
            if not fn.endswith(".py"):
                continue
            if fn in EXCLUDE_FILES:
                continue
            yield dn / fn


def find_hits(root: Path) -> list[tuple[Path, int, str, str]]:
    compiled = [re.compile(p) for p in FORBIDDEN_PATTERNS]
    hits = []
    for fp in iter_py_files(root):
        text = fp.read_text(encoding="utf-8")
        for i, line in enumerate(text.splitlines(), start=1):
            for rx in compiled:
                if rx.search(line):
                    hits.append((fp.relative_to(root), i, line.strip(), rx.pattern))
    return hits


def main() -> int:
    root = Path(__file__).resolve().parents[1]
    hits = find_hits(root)

    if not hits:
        print("[OK] No forbidden OS clock usage found.")
        return 0

    print("[FAIL] Forbidden OS clock usage found:\n")
    for rel, ln, line, pat in hits:
        print(f"- {rel}:{ln}: {line}")
        print(f"  matched: {pat}")
    print("\nFix: take `now` as a parameter or route through game_time.resolve_now().")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
