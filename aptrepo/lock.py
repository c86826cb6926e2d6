#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Advisory lock guarding a repository root for a whole update or publish
cycle.
"""

import os
import time
import fcntl
import contextlib
import logging

from typing import Optional

from aptrepo.exceptions import RepositoryLockedError

logger = logging.getLogger(__name__)

LOCK_NAME = '.aptrepo.lock'


class RepositoryLock:
    """
    Lock file based inter-process lock.

    The lock is an exclusive flock on the lock file, so the kernel drops it
    if the owner dies; a file left behind by a killed run does not block
    later runs. The file holds the PID of the owner and is removed on
    release.
    """
    path: str
    _fd: Optional[int]

    def __init__(self, root: str, timeout: float = 30.0, interval: float = 0.1):
        self.path = os.path.join(root, LOCK_NAME)
        self.timeout = timeout
        self.interval = interval
        self._fd = None

    def _try_lock(self) -> Optional[int]:
        fd = os.open(self.path, os.O_CREAT | os.O_RDWR)

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            return None

        # The previous owner may have unlinked the file between our open and flock
        try:
            current = os.stat(self.path)
        except FileNotFoundError:
            current = None

        if current is None or current.st_ino != os.fstat(fd).st_ino:
            os.close(fd)
            return None

        return fd

    def acquire(self) -> None:
        """
        Takes the lock, polling until the timeout expires

        :raises RepositoryLockedError:
        """
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        end = time.monotonic() + self.timeout

        while True:
            fd = self._try_lock()

            if fd is not None:
                os.ftruncate(fd, 0)
                os.write(fd, str(os.getpid()).encode())
                self._fd = fd
                logger.debug('Acquired %s', self.path)
                return

            if time.monotonic() >= end:
                raise RepositoryLockedError(self.path)

            time.sleep(self.interval)

    def release(self) -> None:
        """
        Drops the lock if held
        """
        if self._fd is None:
            return

        try:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(self.path)
        finally:
            os.close(self._fd)
            self._fd = None
            logger.debug('Released %s', self.path)

    @property
    def locked(self) -> bool:
        return self._fd is not None

    def __enter__(self) -> 'RepositoryLock':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
