import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr
from io import StringIO

from crossroads.domain.models import StrategyKind
from crossroads.experiments.run_experiment import build_parser, main, parse_settings

class TestCli(unittest.TestCase):
    def parse(self, argv):
        return parse_settings(build_parser(), argv)

    def test_defaults(self):
        args, settings = self.parse([])
        self.assertEqual(settings.strategy, StrategyKind.TRAFFIC_LIGHT)
        self.assertEqual(settings.min_interarrival_s, 2.0)
        self.assertEqual(settings.max_interarrival_s, 4.0)
        self.assertEqual(settings.window_size, 600)
        self.assertEqual(args.duration, 120.0)

    def test_invalid_settings_rejected(self):
        for argv in (
            ["--min-interarrival", "1.0"],
            ["--min-interarrival", "5", "--max-interarrival", "3"],
            ["--window-size", "100"],
            ["--window-size", "1200"],
            ["--controller", "roundabout"],
            ["--duration", "0"],
        ):
            with self.subTest(argv=argv), redirect_stderr(StringIO()):
                with self.assertRaises(SystemExit):
                    self.parse(argv)

    def test_short_run_writes_result(self):
        with tempfile.TemporaryDirectory() as output_dir:
            code = main(["--duration", "2", "--seed", "7", "--output-dir", output_dir])
            self.assertEqual(code, 0)

            files = os.listdir(output_dir)
            self.assertEqual(len(files), 1)
            self.assertTrue(files[0].startswith("traffic-light_"))
            with open(os.path.join(output_dir, files[0]), encoding="utf-8") as f:
                result = json.load(f)

        self.assertEqual(result["ticks"], 40)
        self.assertAlmostEqual(result["simulated_seconds"], 2.0)
        self.assertIsNone(result["collision"])
        self.assertEqual(result["settings"]["seed"], 7)

if __name__ == '__main__':
    unittest.main()
