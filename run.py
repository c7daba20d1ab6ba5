#!/usr/bin/env python3
"""
My Daily Salah - launcher (FastAPI + uvicorn)

What it does:
- Creates .venv if missing
- Installs the project into .venv (pip install -e .)
- Starts the web app, which runs the prayer ticker in-process
- Or runs the headless ticker on its own

Usage:
  python run.py                          # web app at http://127.0.0.1:8000
  python run.py --ticker                 # headless countdown + adhan signal
  python run.py --ticker --lat 51.5 --lng -0.12
  python run.py --no-install             # skip pip install
  python run.py --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import argparse
import os
import platform
import subprocess
import sys
import threading
import time
import webbrowser
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parent
VENV_DIR = PROJECT_ROOT / ".venv"


def is_windows() -> bool:
    return platform.system().lower().startswith("win")


def venv_python_path() -> Path:
    if is_windows():
        return VENV_DIR / "Scripts" / "python.exe"
    return VENV_DIR / "bin" / "python"


def run(cmd: list[str], *, env: dict | None = None, check: bool = True) -> int:
    print("\n> " + " ".join(cmd))
    return subprocess.run(cmd, cwd=str(PROJECT_ROOT), env=env, check=check).returncode


def ensure_venv() -> Path:
    py = venv_python_path()
    if py.exists():
        return py
    print(f"Creating virtual environment at: {VENV_DIR}")
    run([sys.executable, "-m", "venv", str(VENV_DIR)])
    if not py.exists():
        raise RuntimeError(f"Virtualenv created but python not found at: {py}")
    return py


def pip_install(venv_py: Path) -> None:
    if not (PROJECT_ROOT / "pyproject.toml").exists():
        raise FileNotFoundError(f"Missing pyproject.toml in {PROJECT_ROOT}")
    run([str(venv_py), "-m", "pip", "install", "--upgrade", "pip"])
    run([str(venv_py), "-m", "pip", "install", "-e", str(PROJECT_ROOT)])


def location_env(lat: float | None, lng: float | None) -> dict:
    env = dict(os.environ)
    if lat is not None:
        env["SALAH_LATITUDE"] = str(lat)
    if lng is not None:
        env["SALAH_LONGITUDE"] = str(lng)
    return env


def start_server(venv_py: Path, host: str, port: int, reload: bool, env: dict) -> int:
    cmd = [str(venv_py), "-m", "uvicorn", "daily_salah.main:app", "--host", host, "--port", str(port)]
    if reload:
        cmd.append("--reload")

    url = f"http://{host if host != '0.0.0.0' else '127.0.0.1'}:{port}"
    print(f"\nStarting server: {url}")
    print("Press Ctrl+C to stop.\n")

    def open_later():
        time.sleep(1.0)
        webbrowser.open(url)

    threading.Thread(target=open_later, daemon=True).start()
    return run(cmd, env=env, check=False)


def main() -> int:
    parser = argparse.ArgumentParser(prog="daily-salah", description="Launcher for My Daily Salah.")
    parser.add_argument("--ticker", action="store_true", help="Run only the headless prayer ticker")
    parser.add_argument("--lat", type=float, default=None, help="Latitude for prayer times")
    parser.add_argument("--lng", type=float, default=None, help="Longitude for prayer times")
    parser.add_argument("--no-install", action="store_true", help="Skip pip install (assumes .venv is ready)")
    parser.add_argument("--host", default="127.0.0.1", help="Server host (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Server port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable uvicorn --reload")
    args = parser.parse_args()

    venv_py = ensure_venv()
    if not args.no_install:
        pip_install(venv_py)

    env = location_env(args.lat, args.lng)
    if args.ticker:
        print("Running prayer ticker (Ctrl+C to stop)...\n")
        return run([str(venv_py), "-m", "daily_salah.jobs.ticker", "-v"], env=env, check=False)
    return start_server(venv_py, args.host, args.port, args.reload, env)


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        print("\nStopped.")
