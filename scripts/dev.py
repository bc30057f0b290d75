#!/usr/bin/env python3
import os
import signal
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = ROOT / 'backend'


def spawn_backend() -> subprocess.Popen:
    backend_cmd = [
        sys.executable,
        '-m',
        'uvicorn',
        'online_assessment.main:app',
        '--host',
        '0.0.0.0',
        '--port',
        os.environ.get('PORT', '8001'),
        '--reload',
    ]
    return subprocess.Popen(backend_cmd, cwd=str(BACKEND_DIR), env=os.environ.copy())


def main() -> int:
    backend = spawn_backend()

    def handle_signal(_sig: int, _frame: object) -> None:
        if backend.poll() is None:
            backend.terminate()
        raise SystemExit(0)

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    return backend.wait()


if __name__ == '__main__':
    raise SystemExit(main())
