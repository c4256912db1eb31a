#!/usr/bin/env python3
"""
Evaluation runner for the textpack Huffman encoder.

This evaluation script:
- Runs the pytest suite in tests/ and collects per-test pass/fail status
- Optionally encodes a sample corpus and records compression statistics
- Writes a structured JSON report with environment metadata

Run with:
    python evaluation/evaluation.py [--corpus FILE] [--output REPORT]
"""
import os
import sys
import json
import uuid
import platform
import subprocess
import tempfile
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
TEXTPACK = PROJECT_ROOT / "textpack"
if str(TEXTPACK) not in sys.path:
    sys.path.insert(0, str(TEXTPACK))

from huffman_config import EncoderConfig
from huffman_errors import HuffmanError
from huffman_service import HuffmanService


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def get_environment_info():
    """Collect environment information for the report."""
    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "architecture": platform.machine(),
        "hostname": platform.node(),
    }


def run_pytest(tests_dir, timeout=600):
    """
    Run pytest on the tests/ folder with the module directory on PYTHONPATH.

    Returns:
        dict with test results
    """
    print(f"\n{'=' * 60}")
    print("RUNNING TESTS")
    print(f"{'=' * 60}")
    print(f"Tests directory: {tests_dir}")

    cmd = [sys.executable, "-m", "pytest", str(tests_dir), "-v", "--tb=short"]
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(TEXTPACK), env.get("PYTHONPATH")]))

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            env=env,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        print("❌ Test execution timed out")
        return {
            "success": False,
            "exit_code": -1,
            "tests": [],
            "summary": {"error": "Test execution timed out"},
            "stdout": "",
            "stderr": "",
        }

    stdout = result.stdout
    stderr = result.stderr
    tests = parse_pytest_verbose_output(stdout)
    summary = summarize(tests)

    print(
        f"\nResults: {summary['passed']} passed, {summary['failed']} failed, "
        f"{summary['errors']} errors, {summary['skipped']} skipped (total: {summary['total']})"
    )
    for test in tests:
        status_icon = {
            "passed": "✅",
            "failed": "❌",
            "error": "💥",
            "skipped": "⏭️"
        }.get(test.get("outcome"), "❓")
        print(f"  {status_icon} {test.get('nodeid', 'unknown')}: {test.get('outcome', 'unknown')}")

    return {
        "success": result.returncode == 0,
        "exit_code": result.returncode,
        "tests": tests,
        "summary": summary,
        "stdout": stdout[-3000:],
        "stderr": stderr[-1000:],
    }


def parse_pytest_verbose_output(output):
    """Parse pytest verbose output to extract test results."""
    tests = []
    for line in output.split('\n'):
        line_stripped = line.strip()
        # Match lines like: tests/test_huffman_core.py::test_count_frequencies PASSED
        if '::' not in line_stripped:
            continue
        for status_word, outcome in ((' PASSED', "passed"), (' FAILED', "failed"),
                                     (' ERROR', "error"), (' SKIPPED', "skipped")):
            if status_word in line_stripped:
                nodeid = line_stripped.split(status_word)[0].strip()
                tests.append({
                    "nodeid": nodeid,
                    "name": nodeid.split("::")[-1],
                    "outcome": outcome,
                })
                break
    return tests


def summarize(tests):
    counts = {"total": len(tests), "passed": 0, "failed": 0, "errors": 0, "skipped": 0}
    for test in tests:
        key = "errors" if test["outcome"] == "error" else test["outcome"]
        counts[key] += 1
    return counts


def measure_corpus(corpus_path, work_dir):
    """Encode and decode a corpus file, returning size and timing figures."""
    work_dir = Path(work_dir)
    config = EncoderConfig.for_input(
        corpus_path,
        output_path=work_dir / "corpus-compressed.bin",
        codes_path=work_dir / "corpus-codes.txt",
    )
    service = HuffmanService()
    report = service.encode_file(config)
    decoded_path = work_dir / "corpus-decoded.txt"
    service.decode_file(config.output_path, config.codes_path, decoded_path, config.encoding)

    return {
        "corpus": str(corpus_path),
        "symbols": report.symbol_count,
        "distinct_symbols": report.distinct_symbols,
        "source_bytes": report.source_bytes,
        "packed_bytes": report.packed_bytes,
        "artifact_bytes": config.output_path.stat().st_size + config.codes_path.stat().st_size,
        "bits_per_symbol": round(report.bits_per_symbol, 4),
        "compression_ratio": round(report.compression_ratio, 4),
        "roundtrip_ok": decoded_path.read_bytes() == Path(corpus_path).read_bytes(),
        "timings_ms": {stage: round(ms, 3) for stage, ms in report.timings.items()},
    }


def generate_output_path():
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = datetime.now()
    output_dir = PROJECT_ROOT / "evaluation" / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir / "report.json"


def main(argv=None):
    """Main entry point for evaluation."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the textpack evaluation")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)"
    )
    parser.add_argument("--corpus", type=str, default=None, help="Text file to compress for the ratio figures")
    parser.add_argument("--skip-tests", action="store_true", help="Only measure the corpus")
    args = parser.parse_args(argv)

    run_id = generate_run_id()
    started_at = datetime.now()
    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    tests = None
    corpus = None
    error_message = None
    if not args.skip_tests:
        tests = run_pytest(PROJECT_ROOT / "tests")
        if not tests["success"]:
            error_message = "Test suite failed"

    if args.corpus:
        print(f"\n{'=' * 60}")
        print(f"MEASURING CORPUS: {args.corpus}")
        print(f"{'=' * 60}")
        try:
            with tempfile.TemporaryDirectory() as work_dir:
                corpus = measure_corpus(args.corpus, work_dir)
            print(f"  Ratio: {corpus['compression_ratio']:.3f} ({corpus['bits_per_symbol']:.3f} bits/symbol)")
            if not corpus["roundtrip_ok"]:
                error_message = "Corpus round trip mismatch"
        except HuffmanError as e:
            print(f"\nERROR: {e}")
            error_message = str(e)

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()
    success = error_message is None

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "error": error_message,
        "environment": get_environment_info(),
        "tests": tests,
        "corpus": corpus,
    }

    output_path = Path(args.output) if args.output else generate_output_path()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\n✅ Report saved to: {output_path}")

    print(f"\n{'=' * 60}")
    print("EVALUATION COMPLETE")
    print(f"{'=' * 60}")
    print(f"Run ID: {run_id}")
    print(f"Duration: {duration:.2f}s")
    print(f"Success: {'✅ YES' if success else '❌ NO'}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
