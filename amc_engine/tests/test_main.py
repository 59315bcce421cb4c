"""
Tests: Entry point — sample run and `--serve` dispatch.

Run with:
    pytest amc_engine/tests/test_main.py -v
"""

from datetime import datetime, timezone

import pytest

from amc_engine import main as entry


@pytest.fixture
def calls(monkeypatch):
    seen = []
    monkeypatch.setattr(entry, "run", lambda: seen.append("run"))
    monkeypatch.setattr(entry, "serve", lambda: seen.append("serve"))
    return seen


class TestMain:
    def test_serve_flag_starts_server(self, calls):
        entry.main(["--serve"])
        assert calls == ["serve"]

    def test_default_prints_sample(self, calls):
        entry.main([])
        assert calls == ["run"]

    def test_sample_run(self):
        result = entry.run(datetime(2024, 12, 15, tzinfo=timezone.utc))
        assert result["breakdown"]["finalPrice"] == pytest.approx(8700)
        assert result["status"]["status"] == "ExpiringSoon"
        assert len(result["renewal"]["contract"]["history"]) == 1
