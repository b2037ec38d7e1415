import io
import json
import os
import tempfile
import unittest
from unittest import mock

from rich.console import Console

from rpc_health import health_cli
from rpc_health.health_cli import EXIT_ERROR, EXIT_INTERRUPTED, EXIT_NOT_SUITABLE, EXIT_OK, main


def healthy_dump(**consensus_overrides):
    consensus = {
        "rate_limit_samples": [{"status": 200, "elapsed": 0.04}] * 10,
        "latency_samples": [0.04],
        "finalized_slot": "8123456",
        "head_slot": "8123520",
    }
    consensus.update(consensus_overrides)
    return {
        "now": 1700000010,
        "l1": {
            "chain_id": "0x1",
            "rate_limit_samples": [{"status": 200, "elapsed": 0.01}] * 10,
            "latency_samples": [0.01],
            "block_times": [11.0],
            "latest_block": {"number": "0x10", "timestamp": 1700000000},
        },
        "consensus": consensus,
    }


class CLITestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.out = io.StringIO()
        patcher = mock.patch.object(health_cli, 'console', Console(file=self.out, width=200))
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self.tmp.cleanup()

    def dump(self, data, name="run.json"):
        path = os.path.join(self.tmp.name, name)
        with open(path, 'w', encoding='utf-8') as fh:
            json.dump(data, fh)
        return path

    @property
    def output(self):
        return self.out.getvalue()


class TestMain(CLITestCase):
    def test_suitable_node_exits_zero(self):
        code = main(["-m", self.dump(healthy_dump()), "--no-banner"])
        self.assertEqual(code, EXIT_OK)
        self.assertIn("score: 89/100", self.output)
        self.assertIn("profile: ethereum", self.output)
        self.assertIn("[rate_limiting]", self.output)

    def test_not_suitable_node_exits_one(self):
        code = main(["-m", self.dump(healthy_dump(head_slot=None)), "--no-banner"])
        self.assertEqual(code, EXIT_NOT_SUITABLE)
        self.assertIn("critical_failure: consensus layer failed", self.output)

    def test_banner(self):
        main(["-m", self.dump(healthy_dump())])
        self.assertIn("RPC Health", self.output)

    def test_profile_detected_from_chain_id(self):
        data = healthy_dump()
        data["l1"]["chain_id"] = "0x64"
        main(["-m", self.dump(data), "--no-banner"])
        self.assertIn("profile: gnosis", self.output)

    def test_explicit_profile_wins(self):
        main(["-m", self.dump(healthy_dump()), "--profile", "Sepolia Testnet", "--no-banner"])
        self.assertIn("profile: sepolia", self.output)

    def test_critical_age_override(self):
        path = self.dump(healthy_dump())
        self.assertEqual(main(["-m", path, "--now", "1700000035", "--no-banner"]), EXIT_NOT_SUITABLE)
        self.assertIn("critical_failure: block production exceeded 20s", self.output)

        self.out.seek(0)
        self.out.truncate()
        self.assertEqual(
            main(["-m", path, "--now", "1700000035", "--critical-age", "60", "--no-banner"]),
            EXIT_NOT_SUITABLE,
        )
        self.assertIn("score: 55/100", self.output)
        self.assertIn("critical_failure: none", self.output)
        self.assertIn("freshness: -29", self.output)

    def test_output_file(self):
        report = os.path.join(self.tmp.name, "out", "report.txt")
        code = main(["-m", self.dump(healthy_dump()), "-o", report, "--no-banner"])
        self.assertEqual(code, EXIT_OK)
        with open(report, encoding='utf-8') as fh:
            self.assertIn("score: 89/100", fh.read())
        self.assertIn("Report saved", self.output)

    def test_show_profiles(self):
        self.assertEqual(main(["--show-profiles"]), EXIT_OK)
        for key in ("ethereum", "sepolia", "gnosis"):
            self.assertIn(key, self.output)
        self.assertIn("Block span", self.output)


class TestErrors(CLITestCase):
    def test_missing_measurements_file(self):
        code = main(["-m", os.path.join(self.tmp.name, "missing.json")])
        self.assertEqual(code, EXIT_ERROR)
        self.assertIn("not found", self.output)

    def test_invalid_measurements(self):
        path = os.path.join(self.tmp.name, "bad.json")
        with open(path, 'w', encoding='utf-8') as fh:
            fh.write("[]")
        self.assertEqual(main(["-m", path]), EXIT_ERROR)

    def test_non_numeric_error_code(self):
        data = healthy_dump()
        data["l1"]["rate_limit_samples"] = [{"status": 200, "elapsed": 0.01, "error_code": "busy"}]
        self.assertEqual(main(["-m", self.dump(data)]), EXIT_ERROR)
        self.assertIn("non-numeric error_code", self.output)

    def test_nan_latency_is_rejected(self):
        path = os.path.join(self.tmp.name, "nan.json")
        with open(path, 'w', encoding='utf-8') as fh:
            fh.write('{"now": 1, "l1": {"latency_samples": [NaN]}}')
        self.assertEqual(main(["-m", path]), EXIT_ERROR)

    def test_unknown_profile(self):
        code = main(["-m", self.dump(healthy_dump()), "--profile", "solana"])
        self.assertEqual(code, EXIT_ERROR)
        self.assertIn("Unknown chain profile", self.output)

    def test_negative_critical_age(self):
        self.assertEqual(main(["-m", self.dump(healthy_dump()), "--critical-age", "-1"]), EXIT_ERROR)

    def test_measurements_required(self):
        with mock.patch('sys.stderr', io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertEqual(ctx.exception.code, 2)

    def test_unwritable_output(self):
        blocker = os.path.join(self.tmp.name, "file")
        with open(blocker, 'w', encoding='utf-8') as fh:
            fh.write("x")
        code = main(["-m", self.dump(healthy_dump()), "-o", os.path.join(blocker, "r.txt"), "--no-banner"])
        self.assertEqual(code, EXIT_ERROR)


class TestInterrupt(CLITestCase):
    def test_interrupt_while_scoring(self):
        with mock.patch.object(health_cli.HealthEngine, 'evaluate', side_effect=KeyboardInterrupt):
            code = main(["-m", self.dump(healthy_dump()), "--no-banner"])
        self.assertEqual(code, EXIT_INTERRUPTED)
        self.assertIn("interrupted", self.output)

    def test_interrupt_while_listing_profiles(self):
        with mock.patch.object(health_cli.ConsoleUI, 'print_profiles', side_effect=KeyboardInterrupt):
            self.assertEqual(main(["--show-profiles"]), EXIT_INTERRUPTED)


if __name__ == '__main__':
    unittest.main()
