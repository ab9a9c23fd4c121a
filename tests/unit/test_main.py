"""Unit tests for the main entry point and exit code mapping."""

import csv
import json
import signal
from unittest.mock import patch

import pytest

from hoststats import main as main_module
from hoststats.config import EXIT_CODE
from hoststats.errors import SinkWriteError
from hoststats.main import main, run_collection, signal_handler
from tests.fixtures import (
    EndpointScript,
    MockHostCollector,
    MockSessionFactory,
    connection_refused,
    make_host_stats,
)


@pytest.fixture(autouse=True)
def reset_cancel_event():
    main_module.cancel_event.clear()
    yield
    main_module.cancel_event.clear()


@pytest.fixture
def fake_vsphere():
    """Replace the pyVmomi factory and collector with scripted ones."""
    factory = MockSessionFactory({
        "vc01.example.com": EndpointScript(records=make_host_stats("vc01", 2)),
        "vc02.example.com": EndpointScript(records=make_host_stats("vc02", 1)),
    })
    collector = MockHostCollector(factory)
    with patch("hoststats.main.VSphereSessionFactory", return_value=factory), \
            patch("hoststats.main.VSphereHostCollector", return_value=collector), \
            patch("hoststats.progress.is_interactive_terminal", return_value=False):
        yield factory


def _output_path(config_file):
    return json.loads(config_file.read_text())["Outpath"]


class TestRunCollection:
    """Tests for run_collection function."""

    def test_success(self, base_args, legacy_config_file, fake_vsphere):
        assert run_collection(base_args) == EXIT_CODE.SUCCESS

        with open(_output_path(legacy_config_file), newline='') as f:
            rows = list(csv.reader(f))
        assert rows[0][0] == "Cluster"
        assert [r[1] for r in rows[1:]] == ["vc01-esx00", "vc01-esx01", "vc02-esx00"]

    def test_partial_failure(self, base_args, fake_vsphere):
        fake_vsphere.scripts["vc02.example.com"].connect_error = connection_refused("vc02")
        assert run_collection(base_args) == EXIT_CODE.PARTIAL_FAILURE

    def test_output_override(self, base_args, tmp_path, fake_vsphere):
        base_args.output = str(tmp_path / "override.xlsx")
        assert run_collection(base_args) == EXIT_CODE.SUCCESS
        assert (tmp_path / "override.xlsx").is_file()

    def test_what_if_contacts_nothing(self, base_args, legacy_config_file, fake_vsphere):
        base_args.what_if = True
        assert run_collection(base_args) == EXIT_CODE.SUCCESS
        assert fake_vsphere.connected == []
        assert not (legacy_config_file.parent / "hoststats.csv").exists()

    def test_cancelled(self, base_args, fake_vsphere):
        main_module.cancel_event.set()
        assert run_collection(base_args) == EXIT_CODE.INTERRUPTED
        assert fake_vsphere.connected == []

    def test_prints_summary_table(self, base_args, fake_vsphere):
        base_args.no_summary_table = False
        with patch("hoststats.main.print_summary") as mock_print:
            run_collection(base_args)
        mock_print.assert_called_once()


class TestMainExitCodes:
    """Tests for main() exception handling."""

    def test_missing_config(self, tmp_path, fake_vsphere):
        code = main(["--config-file", str(tmp_path / "absent.json"), "--no-summary-table"])
        assert code == EXIT_CODE.CONFIG_ERROR
        assert fake_vsphere.connected == []

    def test_malformed_config(self, tmp_path, fake_vsphere):
        config_file = tmp_path / "config.json"
        config_file.write_text('{"VCenters": [{"Hostname": "vc01"}]}')
        code = main(["--config-file", str(config_file), "--no-summary-table"])
        assert code == EXIT_CODE.CONFIG_ERROR
        assert fake_vsphere.connected == []

    def test_config_not_utf8(self, tmp_path, fake_vsphere):
        config_file = tmp_path / "config.json"
        config_file.write_bytes(b'{"Outpath": "out\xff\xfe.csv", "VCenters": []}')
        assert main(["-c", str(config_file), "--what-if"]) == EXIT_CODE.CONFIG_ERROR
        assert fake_vsphere.connected == []

    def test_tab_indented_json_config(self, tmp_path, legacy_config_file, fake_vsphere):
        config_file = tmp_path / "tabbed.json"
        config_file.write_text(json.dumps(json.loads(legacy_config_file.read_text()), indent="\t"))
        code = main(["--config-file", str(config_file), "--no-summary-table"])
        assert code == EXIT_CODE.SUCCESS

    def test_success(self, legacy_config_file, fake_vsphere):
        code = main(["--config-file", str(legacy_config_file), "--no-summary-table"])
        assert code == EXIT_CODE.SUCCESS

    def test_unwritable_output(self, legacy_config_file, tmp_path, fake_vsphere):
        code = main(["--config-file", str(legacy_config_file), "--no-summary-table",
                     "--output", str(tmp_path / "missing" / "out.csv")])
        assert code == EXIT_CODE.SINK_ERROR
        assert fake_vsphere.connected == []

    def test_sink_error_during_merge(self, legacy_config_file):
        with patch("hoststats.main.run_collection", side_effect=SinkWriteError("disk full")):
            assert main(["--config-file", str(legacy_config_file)]) == EXIT_CODE.SINK_ERROR

    def test_keyboard_interrupt(self, legacy_config_file):
        with patch("hoststats.main.run_collection", side_effect=KeyboardInterrupt):
            assert main(["--config-file", str(legacy_config_file)]) == EXIT_CODE.INTERRUPTED

    def test_unexpected_exception(self, legacy_config_file):
        with patch("hoststats.main.run_collection", side_effect=RuntimeError("bug")):
            assert main(["--config-file", str(legacy_config_file)]) == EXIT_CODE.ERROR

    def test_signal_handlers_restored(self, legacy_config_file, fake_vsphere):
        before = signal.getsignal(signal.SIGINT)
        main(["--config-file", str(legacy_config_file), "--no-summary-table"])
        assert signal.getsignal(signal.SIGINT) == before


class TestSignalHandler:
    """Tests for signal_handler function."""

    def test_first_signal_sets_cancel(self):
        signal_handler(signal.SIGINT, None)
        assert main_module.cancel_event.is_set()

    def test_second_signal_exits(self):
        main_module.cancel_event.set()
        with pytest.raises(SystemExit) as exc_info:
            signal_handler(signal.SIGTERM, None)
        assert exc_info.value.code == EXIT_CODE.INTERRUPTED

    def test_second_signal_warns_about_blocked_workers(self, capturing_logger):
        main_module.cancel_event.set()
        with patch.object(main_module, "logger", capturing_logger), pytest.raises(SystemExit):
            signal_handler(signal.SIGINT, None)
        capturing_logger.assert_logged('warning', "exiting when blocked workers return")

    def test_second_signal_restores_default_handling(self, legacy_config_file):
        before = signal.getsignal(signal.SIGINT)

        def interrupted_twice(args):
            signal_handler(signal.SIGINT, None)
            signal_handler(signal.SIGINT, None)

        with patch("hoststats.main.run_collection", side_effect=interrupted_twice):
            with pytest.raises(SystemExit) as exc_info:
                main(["--config-file", str(legacy_config_file)])
        assert exc_info.value.code == EXIT_CODE.INTERRUPTED
        assert signal.getsignal(signal.SIGINT) == before
