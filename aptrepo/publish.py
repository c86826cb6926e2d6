#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Mirrors a finished repository tree to a remote store.

Changed files are uploaded with a content type chosen by suffix, in an
order that keeps the published repository consistent for clients, and
remote objects with no local counterpart are deleted afterwards.
"""

import os
import dataclasses
import logging

from typing import List, Optional, Tuple

from aptrepo import tags
from aptrepo.exceptions import ConfigurationError
from aptrepo.lock import RepositoryLock
from aptrepo.transport import Transport

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    '.html': 'text/html',
    '.deb': 'application/vnd.debian.binary-package',
    '.gz': 'application/gzip',
    '.xz': 'application/x-xz',
    '.gpg': 'application/pgp-keys',
    '.key': 'application/pgp-keys',
}

TEXT_FILES = ('Packages', 'Release', 'InRelease')

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


def content_type(key: str) -> str:
    """
    Chooses the content type for a repository file

    :param str key:
    :return str:
    """
    name = key.rsplit('/', 1)[-1]
    _, suffix = os.path.splitext(name)

    if suffix in CONTENT_TYPES:
        return CONTENT_TYPES[suffix]

    if name in TEXT_FILES:
        return 'text/plain'

    return DEFAULT_CONTENT_TYPE


def upload_rank(key: str) -> int:
    """
    Orders uploads: pool files, then indices and everything else, then the
    Release family, with InRelease last

    :param str key:
    :return int:
    """
    name = key.rsplit('/', 1)[-1]

    if key.startswith('pool/'):
        return 0

    if key.startswith('dists/') and key.count('/') == 2:
        return 3 if name == 'InRelease' else 2

    return 1


@dataclasses.dataclass
class PublishResult:
    """
    What a publish run changed on the remote
    """
    uploaded: List[str] = dataclasses.field(default_factory=list)
    unchanged: List[str] = dataclasses.field(default_factory=list)
    deleted: List[str] = dataclasses.field(default_factory=list)


class Publisher:
    """
    Mirrors a local repository tree to a :class:Transport
    """
    root: str
    transport: Transport

    def __init__(self, root: str, transport: Transport, lock_timeout: float = 30.0):
        self.root = root
        self.transport = transport
        self.lock_timeout = lock_timeout

    def local_files(self) -> List[Tuple[str, str]]:
        """
        Lists the files to publish, skipping hidden files and directories

        :return List[Tuple[str, str]]: (key, path) pairs in upload order
        """
        found = []

        for directory, directories, files in os.walk(self.root):
            directories[:] = sorted(name for name in directories if not name.startswith('.'))

            for name in files:
                if name.startswith('.') or name.endswith('.tmp'):
                    continue

                path = os.path.join(directory, name)
                key = os.path.relpath(path, self.root).replace(os.sep, '/')
                found.append((key, path))

        return sorted(found, key=lambda item: (upload_rank(item[0]), item[0]))

    def publish(self, lock: Optional[RepositoryLock] = None) -> PublishResult:
        """
        Mirrors the tree under the repository lock.

        :param RepositoryLock lock: Defaults to the lock of the root

        :return PublishResult:

        :raises ConfigurationError: If the root does not exist
        :raises UploadError: On the first failed upload or delete
        :raises RepositoryLockedError:
        """
        if not os.path.isdir(self.root):
            raise ConfigurationError(self.root, 'is not a directory')

        if lock is None:
            lock = RepositoryLock(self.root, timeout=self.lock_timeout)

        with lock:
            return self._sync()

    def _sync(self) -> PublishResult:
        result = PublishResult()

        logger.info('Syncing %s to %r', self.root, self.transport)

        remote = self.transport.list_objects()
        local = self.local_files()

        for key, path in local:
            existing = remote.get(key)

            if existing is not None and existing.etag:
                file_hash = tags.FileHash.from_file(path, key)

                if existing.size == file_hash.size and existing.etag == file_hash.md5:
                    result.unchanged.append(key)
                    continue

            logger.info('Uploading %s', key)
            self.transport.upload(path, key, content_type(key))
            result.uploaded.append(key)

        local_keys = {key for key, _ in local}

        for key in sorted(remote):
            if key in local_keys:
                continue

            logger.info('Deleting %s', key)
            self.transport.delete(key)
            result.deleted.append(key)

        logger.info(
            'Sync completed: %d uploaded, %d unchanged, %d deleted',
            len(result.uploaded), len(result.unchanged), len(result.deleted)
        )

        return result
