"""Tests for the simio command-line entry point."""

import pytest
import zmq

from simio import cli


class TestPeerCommand:
    """Tests for error handling in ``simio peer``."""

    def _run(self, monkeypatch, exc: Exception) -> pytest.ExceptionInfo:
        def _fail(*args, **kwargs):
            raise exc

        monkeypatch.setattr(cli, "run_peer", _fail)
        monkeypatch.setattr("sys.argv", ["simio", "peer", "inproc://cli"])
        with pytest.raises(SystemExit) as excinfo:
            cli.main()
        return excinfo

    def test_malformed_request_exits_cleanly(self, monkeypatch, capsys) -> None:
        excinfo = self._run(monkeypatch, ValueError("expected a 1-byte request, got 3 bytes"))
        assert excinfo.value.code == 1
        err = capsys.readouterr().err
        assert "Error: cannot serve on 'inproc://cli'" in err
        assert "1-byte request" in err

    def test_bind_failure_exits_cleanly(self, monkeypatch, capsys) -> None:
        excinfo = self._run(monkeypatch, zmq.ZMQError(zmq.EADDRINUSE))
        assert excinfo.value.code == 1
        assert "Error: cannot serve on 'inproc://cli'" in capsys.readouterr().err
