import logging

import pytest

from careerprep.utils.logging_config import (
    PerformanceMonitor,
    configure_for_environment,
    get_logger,
    log_function_call,
)


class TestGetLogger:
    @pytest.mark.parametrize("name,expected", [
        ("careerprep.services.graph", "careerprep.services.graph"),
        ("careerprep", "careerprep"),
        ("performance", "careerprep.performance"),
        ("careerprepx", "careerprep.careerprepx"),
    ])
    def test_namespacing(self, name, expected):
        assert get_logger(name).name == expected


class TestEnvironmentProfiles:
    def test_testing_profile_logs_to_console_only(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENVIRONMENT", "testing")
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        assert configure_for_environment() == "testing"
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)
        assert list(tmp_path.iterdir()) == []

    def test_production_profile_uses_log_level(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "error")
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        try:
            configure_for_environment()
            assert logging.getLogger().level == logging.ERROR
            assert logging.getLogger("pymongo").level == logging.WARNING
            names = sorted(p.name for p in tmp_path.iterdir())
            assert len(names) == 2
            assert names[0].startswith("careerprep_2")
            assert names[1].startswith("careerprep_errors_")
        finally:
            monkeypatch.setenv("ENVIRONMENT", "testing")
            configure_for_environment()


class TestTiming:
    def test_performance_monitor_records_elapsed(self):
        with PerformanceMonitor("noop", threshold_ms=10_000) as monitor:
            pass
        assert monitor.elapsed_ms >= 0.0

    def test_performance_monitor_does_not_swallow(self):
        with pytest.raises(RuntimeError):
            with PerformanceMonitor("boom"):
                raise RuntimeError("boom")

    async def test_log_function_call_passes_through(self):
        @log_function_call
        async def double(x):
            return x * 2

        @log_function_call
        async def explode():
            raise ValueError("nope")

        assert double.__name__ == "double"
        assert await double(21) == 42
        with pytest.raises(ValueError):
            await explode()
