import io
import shutil
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from werkzeug.serving import WSGIRequestHandler

from mdwiki import cli
from mdwiki.app import create_app, make_request_handler, run_server
from mdwiki.config import WikiConfig, parse_listen
from mdwiki.core.errors import StartupFailure


class TestParseListen(unittest.TestCase):
    def test_host_and_port(self):
        self.assertEqual(parse_listen("localhost:8080"), ("localhost", 8080))
        self.assertEqual(parse_listen(":9000"), ("0.0.0.0", 9000))
        self.assertEqual(parse_listen("[::1]:8000"), ("::1", 8000))

    def test_invalid_addresses(self):
        for address in ("localhost", "host:abc", "host:0", "host:99999", ""):
            with self.subTest(address=address):
                with self.assertRaises(StartupFailure):
                    parse_listen(address)


class TestWikiConfig(unittest.TestCase):
    def test_from_args(self):
        args = cli.build_parser().parse_args([
            "--pages", "notes", "--listen", "127.0.0.1:9001", "--debug",
            "--log-dir", "logs", "--request-timeout", "5", "--lock-timeout", "1.5",
        ])
        config = WikiConfig.from_args(args)
        self.assertEqual(config.pages_dir, Path("notes"))
        self.assertEqual((config.host, config.port), ("127.0.0.1", 9001))
        self.assertTrue(config.debug)
        self.assertEqual(config.log_dir, Path("logs"))
        self.assertEqual(config.request_timeout, 5.0)
        self.assertEqual(config.lock_timeout, 1.5)

    def test_pages_required(self):
        args = cli.build_parser().parse_args([])
        with self.assertRaises(StartupFailure):
            WikiConfig.from_args(args)

    def test_validate_rejects_bad_timeouts(self):
        test_dir = Path(tempfile.mkdtemp())
        try:
            with self.assertRaises(StartupFailure):
                WikiConfig(pages_dir=test_dir, request_timeout=0).validate()
        finally:
            shutil.rmtree(test_dir)


class TestMain(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        (self.test_dir / "home.md").write_text("# Home", encoding="utf-8")

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def run_main(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli.main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_version(self):
        code, out, _ = self.run_main(["--version"])
        self.assertEqual(code, 0)
        self.assertIn("mdwiki v", out)

    def test_missing_pages_directory_exits_nonzero(self):
        code, _, err = self.run_main(["--pages", str(self.test_dir / "missing")])
        self.assertEqual(code, 1)
        self.assertIn("does not exist", err)

    def test_bad_listen_address_exits_nonzero(self):
        code, _, err = self.run_main(["--pages", str(self.test_dir), "--listen", "nowhere"])
        self.assertEqual(code, 1)
        self.assertIn("host:port", err)

    @patch("mdwiki.cli.setup_logging")
    @patch("mdwiki.app.run_server")
    def test_starts_server(self, run_server_mock, setup_logging_mock):
        code, out, _ = self.run_main(["--pages", str(self.test_dir), "--listen", "127.0.0.1:8123"])
        self.assertEqual(code, 0)
        self.assertIn("127.0.0.1:8123", out)
        app, config = run_server_mock.call_args[0]
        self.assertTrue(app.extensions["mdwiki"].index.contains("home.md"))
        self.assertEqual(config.port, 8123)
        setup_logging_mock.assert_called_once_with(None, False)

    @patch("mdwiki.cli.setup_logging")
    @patch("mdwiki.app.run_server", side_effect=StartupFailure("cannot listen"))
    def test_bind_failure_exits_nonzero(self, run_server_mock, setup_logging_mock):
        code, _, err = self.run_main(["--pages", str(self.test_dir)])
        self.assertEqual(code, 1)
        self.assertIn("cannot listen", err)

    @patch("mdwiki.cli.setup_logging")
    @patch("mdwiki.app.run_server", side_effect=KeyboardInterrupt)
    def test_ctrl_c_exits_cleanly(self, run_server_mock, setup_logging_mock):
        code, out, _ = self.run_main(["--pages", str(self.test_dir)])
        self.assertEqual(code, 0)
        self.assertIn("Server stopped", out)


class TestRunServer(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.config = WikiConfig(pages_dir=self.test_dir, host="127.0.0.1", port=8124, request_timeout=7)
        self.app = create_app(self.config)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_request_handler_has_timeout(self):
        handler = make_request_handler(7)
        self.assertTrue(issubclass(handler, WSGIRequestHandler))
        self.assertEqual(handler.timeout, 7)

    def test_runs_threaded_with_timeout_handler(self):
        with patch.object(self.app, "run") as run:
            run_server(self.app, self.config)
        kwargs = run.call_args[1]
        self.assertEqual((kwargs["host"], kwargs["port"]), ("127.0.0.1", 8124))
        self.assertTrue(kwargs["threaded"])
        self.assertEqual(kwargs["request_handler"].timeout, 7)

    def test_bind_error_becomes_startup_failure(self):
        with patch.object(self.app, "run", side_effect=OSError(98, "Address already in use")):
            with self.assertRaises(StartupFailure):
                run_server(self.app, self.config)

    def test_werkzeug_exit_on_bind_becomes_startup_failure(self):
        with patch.object(self.app, "run", side_effect=SystemExit(1)):
            with self.assertRaises(StartupFailure):
                run_server(self.app, self.config)

    def test_clean_exit_is_not_a_failure(self):
        with patch.object(self.app, "run", side_effect=SystemExit(0)):
            with self.assertRaises(SystemExit):
                run_server(self.app, self.config)


if __name__ == '__main__':
    unittest.main()
