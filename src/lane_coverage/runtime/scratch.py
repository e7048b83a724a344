# runtime/scratch.py
import itertools
import os
import secrets
import shutil
import subprocess
import tempfile
import threading
from pathlib import Path

from lane_coverage.app.protocols import IdGenerator
from lane_coverage.domain.errors import SolverFailure


class UniqueIds(IdGenerator):
    """pid + per-process random salt + monotonically increasing counter."""

    def __init__(self, salt: str | None = None):
        self.salt = salt or secrets.token_hex(4)
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{os.getpid()}_{self.salt}_{n}"


class ScratchSpace:
    """
    Namespaced scratch directory, removed on every exit path.

        with ScratchSpace(ids, prefix="lkh") as scratch:
            scratch.path("problem.atsp").write_text(...)
    """

    def __init__(self, ids: IdGenerator, *, prefix: str = "tsp", root: str | None = None):
        self.ids, self.prefix, self.root = ids, prefix, root
        self.dir: Path | None = None

    def __enter__(self) -> "ScratchSpace":
        if self.root:
            os.makedirs(self.root, exist_ok=True)
        self.dir = Path(tempfile.mkdtemp(prefix=f"{self.prefix}_{self.ids.next_id()}_", dir=self.root))
        return self

    def __exit__(self, *exc) -> bool:
        if self.dir is not None:
            shutil.rmtree(self.dir, ignore_errors=True)
            self.dir = None
        return False

    def path(self, name: str) -> Path:
        if self.dir is None:
            raise RuntimeError("scratch space is not open")
        return self.dir / name


def run_process(argv: list[str], *, cwd: str, timeout_s: float | None) -> None:
    """Default ProcessRunner: subprocess with timeout; every failure becomes SolverFailure."""
    exe = shutil.which(argv[0])
    if exe is None:
        raise SolverFailure(f"solver binary {argv[0]!r} not found on PATH")
    try:
        # run() kills the child before re-raising TimeoutExpired
        subprocess.run(
            [exe, *argv[1:]],
            cwd=cwd,
            timeout=timeout_s,
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
    except subprocess.TimeoutExpired as exc:
        raise SolverFailure(f"{argv[0]} timed out after {timeout_s}s") from exc
    except subprocess.CalledProcessError as exc:
        err = (exc.stderr or b"").decode(errors="replace").strip()[-200:]
        raise SolverFailure(f"{argv[0]} exited with {exc.returncode}: {err}") from exc
    except OSError as exc:
        raise SolverFailure(f"could not start {argv[0]}: {exc}") from exc
