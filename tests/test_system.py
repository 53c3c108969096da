"""Tests for the process stat providers and host snapshot.

procfs parsing runs against a fake /proc tree in a temp directory.
Run with:  python -m pytest tests/  or  python -m unittest discover tests/
"""

import sys
import tempfile
import unittest
import unittest.mock as mock
from pathlib import Path

import psutil

from lambda_report import system
from lambda_report.system.procfs import ProcfsStatsProvider, parse_stat, parse_status
from lambda_report.system.psutil_provider import PsutilStatsProvider


# Fields 1-17 of proc(5); utime=14, stime=15, cutime=16, cstime=17.
_STAT = "4242 (python3 (worker) x) S 1 4242 4242 0 -1 4194560 2210 0 0 0 37 11 3 2 20 0 1 0 1234 0 0\n"

_STATUS = """\
Name:\tpython3
State:\tS (sleeping)
Pid:\t4242
FDSize:\t64
VmPeak:\t  30000 kB
VmRSS:\t   20480 kB
Threads:\t3
"""


class TestProcfsParsing(unittest.TestCase):
    def test_stat_fields(self):
        self.assertEqual(parse_stat(_STAT), {"utime": 37, "stime": 11, "cutime": 3, "cstime": 2})

    def test_stat_plain_command_name(self):
        text = "1 (init) S 0 1 1 0 -1 0 0 0 0 0 5 6 7 8 20 0 1 0 1 0 0"
        self.assertEqual(parse_stat(text), {"utime": 5, "stime": 6, "cutime": 7, "cstime": 8})

    def test_status_fields(self):
        self.assertEqual(parse_status(_STATUS), {"FDSize": 64, "VmRSS": 20480, "Threads": 3})

    def test_status_ignores_other_lines(self):
        self.assertEqual(parse_status("Name:\tx\nnot a field\n"), {})


class TestProcfsProvider(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        root = Path(self.tmp.name)
        (root / "self").mkdir()
        (root / "self" / "stat").write_text(_STAT, encoding="utf-8")
        (root / "self" / "status").write_text(_STATUS, encoding="utf-8")
        (root / "sys" / "kernel" / "random").mkdir(parents=True)
        (root / "sys" / "kernel" / "random" / "boot_id").write_text(
            "6f1c1a59-0e73-4e0c-9f2b-bd52e07c3f8d\n", encoding="utf-8",
        )
        self.provider = ProcfsStatsProvider(root)

    def test_reads_self(self):
        self.assertEqual(self.provider.read_process_stat()["utime"], 37)
        self.assertEqual(self.provider.read_process_status()["Threads"], 3)

    def test_boot_id_stripped(self):
        self.assertEqual(self.provider.read_boot_id(), "6f1c1a59-0e73-4e0c-9f2b-bd52e07c3f8d")

    def test_missing_pid_raises(self):
        with self.assertRaises(OSError):
            self.provider.read_process_stat(99999)


class TestPsutilProvider(unittest.TestCase):
    def test_same_shape_as_procfs(self):
        provider = PsutilStatsProvider()
        stat = provider.read_process_stat()
        self.assertEqual(set(stat), {"utime", "stime", "cutime", "cstime"})
        self.assertTrue(all(isinstance(v, int) and v >= 0 for v in stat.values()))

        status = provider.read_process_status()
        self.assertEqual(set(status), {"VmRSS", "Threads", "FDSize"})
        self.assertGreater(status["VmRSS"], 0)
        self.assertGreaterEqual(status["Threads"], 1)

    def test_boot_id_is_stable(self):
        provider = PsutilStatsProvider()
        self.assertEqual(provider.read_boot_id(), provider.read_boot_id())


class TestDefaultProvider(unittest.TestCase):
    def test_linux_uses_procfs(self):
        with mock.patch.object(sys, "platform", "linux"):
            self.assertIsInstance(system.default_provider(), ProcfsStatsProvider)

    def test_other_platforms_use_psutil(self):
        with mock.patch.object(sys, "platform", "darwin"):
            self.assertIsInstance(system.default_provider(), PsutilStatsProvider)


class TestHostSnapshot(unittest.TestCase):
    def test_os_snapshot_keys(self):
        snap = system.os_snapshot()
        for key in ("hostname", "uptime", "totalmem", "freemem", "usedmem", "cpus", "arch"):
            self.assertIn(key, snap)
        self.assertEqual(snap["usedmem"], snap["totalmem"] - snap["freemem"])
        self.assertIsInstance(snap["cpus"], list)

    def test_cpu_entries(self):
        for cpu in system.os_snapshot()["cpus"]:
            self.assertEqual(set(cpu["times"]), {"user", "nice", "sys", "idle", "irq"})

    def test_memory_usage(self):
        usage = system.memory_usage()
        self.assertGreater(usage["rss"], 0)

    def test_os_snapshot_survives_memory_failure(self):
        with mock.patch("psutil.virtual_memory", side_effect=OSError("no meminfo")):
            snap = system.os_snapshot()
        self.assertIsNone(snap["totalmem"])
        self.assertIsNone(snap["freemem"])
        self.assertIsNone(snap["usedmem"])
        self.assertIsNotNone(snap["arch"])

    def test_os_snapshot_survives_boot_time_failure(self):
        with mock.patch("psutil.boot_time", side_effect=psutil.AccessDenied()):
            snap = system.os_snapshot()
        self.assertIsNone(snap["uptime"])
        self.assertIsNotNone(snap["totalmem"])

    def test_memory_usage_unreadable(self):
        with mock.patch("psutil.Process", side_effect=psutil.NoSuchProcess(1)):
            self.assertIsNone(system.memory_usage())


if __name__ == "__main__":
    unittest.main()
