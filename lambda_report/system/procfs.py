"""Read process statistics straight from Linux procfs."""

from pathlib import Path

from .base import SystemStatsProvider

_PROC = Path("/proc")

# Offsets into /proc/<pid>/stat, counted from the field after "(comm)".
# proc(5) numbers utime as field 14; the state field (3) is offset 0.
_STAT_FIELDS = {
    "utime":  11,
    "stime":  12,
    "cutime": 13,
    "cstime": 14,
}

_STATUS_FIELDS = ("VmRSS", "Threads", "FDSize")


def parse_stat(text: str) -> dict:
    """Parse the contents of /proc/<pid>/stat.

    The command name may itself contain spaces or parentheses, so fields are
    split after the last closing parenthesis.
    """
    rest = text[text.rindex(")") + 1:].split()
    return {name: int(rest[idx]) for name, idx in _STAT_FIELDS.items()}


def parse_status(text: str) -> dict:
    """Parse the contents of /proc/<pid>/status into integer fields.

    Only the fields in ``_STATUS_FIELDS`` are kept; units (kB) are dropped.
    """
    result = {}
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if not sep or key not in _STATUS_FIELDS:
            continue
        parts = value.split()
        if parts:
            result[key] = int(parts[0])
    return result


class ProcfsStatsProvider(SystemStatsProvider):
    name = "procfs"

    def __init__(self, root: Path = _PROC):
        self.root = Path(root)

    def _read(self, pid, leaf: str) -> str:
        return (self.root / str(pid) / leaf).read_text(encoding="utf-8")

    def read_process_stat(self, pid="self") -> dict:
        return parse_stat(self._read(pid, "stat"))

    def read_process_status(self, pid="self") -> dict:
        return parse_status(self._read(pid, "status"))

    def read_boot_id(self) -> str:
        boot_id = self.root / "sys" / "kernel" / "random" / "boot_id"
        return boot_id.read_text(encoding="utf-8").strip()
