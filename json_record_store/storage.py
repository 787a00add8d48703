from __future__ import annotations
import json
import logging
import os
import stat
import tempfile
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, TextIO

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None  # type: ignore[assignment]
    import msvcrt

from .errors import LockTimeoutError

logger = logging.getLogger(__name__)

_LOCK_POLL = 0.05


class _PathLock:
    __slots__ = ("rlock", "depth", "handle")

    def __init__(self) -> None:
        self.rlock = threading.RLock()
        self.depth = 0
        self.handle: Optional[TextIO] = None


_path_locks: Dict[str, _PathLock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: str) -> _PathLock:
    key = os.path.abspath(path)
    with _path_locks_guard:
        lk = _path_locks.get(key)
        if lk is None:
            lk = _path_locks[key] = _PathLock()
        return lk


def _current_umask() -> int:
    # os.umask can only be read by setting it.
    with _path_locks_guard:
        mask = os.umask(0)
        os.umask(mask)
    return mask


def _try_lock_file(fh: TextIO) -> bool:
    try:
        if fcntl is not None:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        else:
            fh.seek(0)
            msvcrt.locking(fh.fileno(), msvcrt.LK_NBLCK, 1)
    except OSError:
        return False
    return True


def _unlock_file(fh: TextIO) -> None:
    if fcntl is not None:
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    else:
        fh.seek(0)
        msvcrt.locking(fh.fileno(), msvcrt.LK_UNLCK, 1)


class FileStorage:
    """
    Whole-file JSON I/O for one store file.

    Plain mode rewrites the file in place. Atomic mode writes a temporary file
    next to the target, fsyncs it and swaps it in with os.replace.
    """
    def __init__(
        self,
        path: str,
        *,
        encoding: str = "utf-8",
        indent: int = 2,
        atomic: bool = False,
        lock_timeout: float = 10.0,
    ) -> None:
        self.path = os.fspath(path)
        self.encoding = encoding
        self.indent = indent
        self.atomic = atomic
        self.lock_timeout = lock_timeout

    @property
    def lock_path(self) -> str:
        return self.path + ".lock"

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def read(self) -> Dict[str, Any]:
        with open(self.path, "r", encoding=self.encoding) as f:
            return json.load(f)

    def dumps(self, data: Dict[str, Any]) -> str:
        return json.dumps(data, indent=self.indent, ensure_ascii=False)

    def write(self, data: Dict[str, Any]) -> None:
        text = self.dumps(data)
        if self.atomic:
            self._write_atomic(text)
            return
        with open(self.path, "w", encoding=self.encoding) as f:
            f.write(text)

    def initialize(self, data: Dict[str, Any]) -> bool:
        """
        Write `data` only when the file does not exist yet. Returns True if
        the file was created.
        """
        if self.exists():
            return False
        self.write(data)
        logger.info("initialized store file %s", self.path)
        return True

    def _write_atomic(self, text: str) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(
            prefix="." + os.path.basename(self.path) + ".", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding=self.encoding) as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates 0600; keep the mode a plain write would leave.
            os.chmod(tmp_path, self._target_mode())
            self.replace_file(tmp_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _target_mode(self) -> int:
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            return 0o666 & ~_current_umask()

    def replace_file(self, tmp_path: str) -> None:
        os.replace(tmp_path, self.path)
        if fcntl is None:
            return
        # Persist the rename itself.
        dir_fd = os.open(os.path.dirname(os.path.abspath(self.path)), os.O_RDONLY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """
        Hold the store exclusively: a per-path thread lock plus an advisory
        lock on the sidecar .lock file. Re-entrant within one thread.
        """
        lk = _lock_for(self.path)
        deadline = time.monotonic() + self.lock_timeout
        if not lk.rlock.acquire(timeout=max(self.lock_timeout, 0)):
            raise LockTimeoutError(self.path, self.lock_timeout)
        try:
            if lk.depth == 0:
                lk.handle = self._acquire_file_lock(deadline)
            lk.depth += 1
            try:
                yield
            finally:
                lk.depth -= 1
                if lk.depth == 0 and lk.handle is not None:
                    handle, lk.handle = lk.handle, None
                    try:
                        _unlock_file(handle)
                    finally:
                        handle.close()
        finally:
            lk.rlock.release()

    def _acquire_file_lock(self, deadline: float) -> TextIO:
        fh = open(self.lock_path, "a+", encoding="utf-8")
        while not _try_lock_file(fh):
            if time.monotonic() >= deadline:
                fh.close()
                raise LockTimeoutError(self.path, self.lock_timeout)
            time.sleep(_LOCK_POLL)
        logger.debug("locked %s", self.lock_path)
        return fh
