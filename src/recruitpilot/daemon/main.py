"""Command-line entrypoint: startup checks, one-off analysis, and app server."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from src.recruitpilot.core.logging_setup import configure_logging
from src.recruitpilot.runtime.service import get_analysis_service


def run_check(*, strict: bool = False) -> int:
    service = get_analysis_service()
    status = service.start(probe_connection=True, source="cli")
    print(json.dumps({"config": service.validate_config(), "start": status}, indent=2))
    if strict and (status["issues"] or status["connection_ok"] is False):
        return 1
    return 0


def run_analyze(*, applicant_file: Path, job_file: Path, job_title: str | None = None, as_json: bool = False) -> int:
    applicant_text = applicant_file.read_text(encoding="utf-8")
    job_description = job_file.read_text(encoding="utf-8")
    service = get_analysis_service()
    service.start(probe_connection=False, source="cli")
    out = service.analyze(applicant_text=applicant_text, job_description=job_description, job_title=job_title)
    result = out["result"]
    if as_json:
        print(json.dumps(out, indent=2))
    else:
        print(f"Match Score: {result['match_score']} (source={result['source']}, success={result['success']})")
        print("\n== Recruiter Analysis ==\n" + result["recruiter_analysis"])
        print(f"\n== Candidate Email ({out['email_subject']}) ==\n" + result["candidate_email"])
        if result["error_message"]:
            print(f"\nError: {result['error_message']}")
    return 0 if result["success"] else 2


def run_server(*, host: str = "127.0.0.1", port: int = 8000) -> int:
    try:
        import uvicorn
    except Exception as exc:  # pragma: no cover - dependency error guard
        raise RuntimeError("uvicorn is required for serve mode") from exc

    uvicorn.run("app.main:app", host=host, port=port, reload=False)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="RecruitPilot application analysis.")
    parser.add_argument("--log-level", default=None, help="Logging level (default: RECRUITPILOT_LOG_LEVEL or INFO).")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Validate assistant config and probe connectivity.")
    check.add_argument("--strict", action="store_true", help="Exit non-zero on config issues or failed probe.")

    analyze = sub.add_parser("analyze", help="Analyze one application from text files.")
    analyze.add_argument("--applicant-file", type=Path, required=True)
    analyze.add_argument("--job-file", type=Path, required=True)
    analyze.add_argument("--job-title", default=None)
    analyze.add_argument("--json", action="store_true", help="Print the full result as JSON.")

    serve = sub.add_parser("serve", help="Run the HTTP app.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "check":
        return run_check(strict=args.strict)
    if args.command == "analyze":
        return run_analyze(
            applicant_file=args.applicant_file,
            job_file=args.job_file,
            job_title=args.job_title,
            as_json=args.json,
        )
    return run_server(host=args.host, port=args.port)


if __name__ == "__main__":
    raise SystemExit(main())
