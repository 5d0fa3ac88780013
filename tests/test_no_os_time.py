from pathlib import Path

from tools.check_no_os_time import find_hits


def test_engine_never_reads_the_host_clock():
    root = Path(__file__).resolve().parents[1]
    assert find_hits(root) == []
