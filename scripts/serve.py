#!/usr/bin/env python
"""
Start the pricing API (uvicorn) or the shipment pricing UI (Streamlit).

Usage:
    python scripts/serve.py api [--port 8000] [--data-dir DIR]
    python scripts/serve.py ui [--data-dir DIR]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
UI_PATH = PROJECT_ROOT / 'src' / 'prep_pricing' / 'ui' / 'app_streamlit.py'


def build_env(args) -> dict:
    env = os.environ.copy()
    src_path = str(PROJECT_ROOT / "src")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [src_path, env.get("PYTHONPATH")]))
    if args.data_dir:
        env["PREP_PRICING_DATA_DIR"] = str(Path(args.data_dir).resolve())
    if args.log_level:
        env["PREP_PRICING_LOG_LEVEL"] = args.log_level
    return env


def main():
    parser = argparse.ArgumentParser(description="Run the prep pricing API or UI")
    parser.add_argument("target", choices=["api", "ui"])
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--data-dir", help="Directory holding the pricing CSV files")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    args = parser.parse_args()

    if args.target == "api":
        cmd = [
            sys.executable, "-m", "uvicorn",
            "prep_pricing.api.main:app",
            "--host", "0.0.0.0",
            "--port", str(args.port or 8000),
            "--reload",
        ]
    else:
        if not UI_PATH.exists():
            print(f"ERROR: UI module not found at {UI_PATH}")
            sys.exit(1)
        cmd = [sys.executable, "-m", "streamlit", "run", str(UI_PATH)]
        if args.port:
            cmd += ["--server.port", str(args.port)]

    print(f"Starting {args.target}: {' '.join(cmd)}")
    try:
        subprocess.run(cmd, cwd=str(PROJECT_ROOT), env=build_env(args))
    except KeyboardInterrupt:
        print("\nStopped.")


if __name__ == "__main__":
    main()
