import json
import sys
from pathlib import Path

from src.recruitpilot.daemon.main import main, run_server


class _FakeService:
    def __init__(self, *, issues=None, connection_ok=True, success=True) -> None:
        self.issues = issues or []
        self.connection_ok = connection_ok
        self.success = success
        self.starts: list[dict] = []
        self.analyses: list[dict] = []

    def start(self, **kwargs):
        self.starts.append(kwargs)
        return {"ok": True, "mode": "ready", "issues": self.issues, "connection_ok": self.connection_ok}

    def validate_config(self):
        return {"ok": True, "is_valid": not self.issues, "issues": self.issues, "config": {}}

    def analyze(self, **kwargs):
        self.analyses.append(kwargs)
        return {
            "ok": True,
            "email_subject": "Application Status Update - Position",
            "result": {
                "success": self.success,
                "recruiter_analysis": "Match Score: 70",
                "candidate_email": "Dear Candidate",
                "match_score": 70,
                "source": "assistant",
                "error_message": None if self.success else "boom",
            },
        }


def test_check_command_is_not_fatal_by_default(monkeypatch, capsys):
    fake = _FakeService(issues=["OPENAI_API_KEY is missing"], connection_ok=True)
    monkeypatch.setattr("src.recruitpilot.daemon.main.get_analysis_service", lambda: fake)
    assert main(["check"]) == 0
    assert fake.starts[0]["source"] == "cli"
    printed = json.loads(capsys.readouterr().out)
    assert printed["config"]["is_valid"] is False


def test_check_command_strict_fails_on_issues(monkeypatch):
    fake = _FakeService(issues=["bad"], connection_ok=True)
    monkeypatch.setattr("src.recruitpilot.daemon.main.get_analysis_service", lambda: fake)
    assert main(["check", "--strict"]) == 1


def test_analyze_command_reads_files(monkeypatch, tmp_path: Path, capsys):
    applicant = tmp_path / "cv.txt"
    job = tmp_path / "job.txt"
    applicant.write_text("my cover letter", encoding="utf-8")
    job.write_text("the job", encoding="utf-8")
    fake = _FakeService()
    monkeypatch.setattr("src.recruitpilot.daemon.main.get_analysis_service", lambda: fake)

    out = main(["analyze", "--applicant-file", str(applicant), "--job-file", str(job), "--job-title", "QA"])
    assert out == 0
    assert fake.analyses == [{"applicant_text": "my cover letter", "job_description": "the job", "job_title": "QA"}]
    assert "Match Score: 70" in capsys.readouterr().out


def test_analyze_command_exit_code_on_failure(monkeypatch, tmp_path: Path):
    (tmp_path / "a.txt").write_text("x", encoding="utf-8")
    (tmp_path / "b.txt").write_text("y", encoding="utf-8")
    monkeypatch.setattr("src.recruitpilot.daemon.main.get_analysis_service", lambda: _FakeService(success=False))
    out = main(["analyze", "--applicant-file", str(tmp_path / "a.txt"), "--job-file", str(tmp_path / "b.txt"), "--json"])
    assert out == 2


def test_run_server_invokes_uvicorn(monkeypatch):
    calls = {"run": 0}

    class _FakeUvicorn:
        @staticmethod
        def run(*args, **kwargs):
            assert args == ("app.main:app",)
            assert kwargs["port"] == 9000
            calls["run"] += 1

    monkeypatch.setitem(sys.modules, "uvicorn", _FakeUvicorn)
    assert run_server(port=9000) == 0
    assert calls["run"] == 1
