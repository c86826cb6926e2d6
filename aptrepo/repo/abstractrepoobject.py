#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
The AbstractRepoObject represents any part of an APT repository,
and provides implementations the required logic for reading and writing
files to that repository.
"""

import os
import contextlib

from typing import Optional, List, IO

from aptrepo import tags
from aptrepo.exceptions import MissingArtifactError

RelativePath = List[str]


class AbstractRepoObject:  # pylint: disable=R0903
    """
    The AbstractRepoObject represents any part of an APT repository,
    and provides implementations the required logic for reading and writing
    files to that repository.

    Paths are given as lists of segments relative to the repository root.
    """

    # noinspection PyUnresolvedReferences
    repo: 'aptrepo.repo.Repository'
    parent: Optional['AbstractRepoObject']

    # noinspection PyUnresolvedReferences
    def __init__(self, repository: 'aptrepo.repo.Repository', parent: Optional['AbstractRepoObject']):
        self.parent = parent
        self.repo = repository

    def _resolve_path(self, relative_path: RelativePath) -> str:
        return os.path.join(self.repo.root, *relative_path)

    def _file_exists(self, relative_path: RelativePath) -> bool:
        """
        Check if a file exists in the repo

        :param List[str] relative_path:

        :return bool:
        """
        return os.path.isfile(self._resolve_path(relative_path))

    def _open_file(self, relative_path: RelativePath) -> IO:
        """
        Opens a file in the repo for read

        :param List[str] relative_path:

        :return IO:

        :raises FileNotFoundError:
        """
        return open(self._resolve_path(relative_path), 'rb')

    def _read_file(self, relative_path: RelativePath) -> bytes:
        with self._open_file(relative_path) as stream:
            return stream.read()

    def _write_file(self, relative_path: RelativePath, data: bytes) -> str:
        """
        Writes a file in the repo, creating directories as needed.

        The data is written next to the target and renamed into place, so
        a reader never sees a partially written file.

        :param List[str] relative_path:
        :param bytes data:

        :return str: The absolute path written
        """
        path = self._resolve_path(relative_path)
        temporary = path + '.tmp'

        os.makedirs(os.path.dirname(path), exist_ok=True)

        try:
            with open(temporary, 'wb') as output:
                output.write(data)

            os.replace(temporary, path)
        finally:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(temporary)

        return path

    def _remove_file(self, relative_path: RelativePath) -> bool:
        """
        Removes a file from the repo if it is present

        :param List[str] relative_path:

        :return bool: Whether a file was removed
        """
        with contextlib.suppress(FileNotFoundError):
            os.unlink(self._resolve_path(relative_path))
            return True

        return False

    def _hash_file(self, relative_path: RelativePath, filename: str) -> tags.FileHash:
        """
        Calculates the size and hashes of a file in the repo

        :param List[str] relative_path:
        :param str filename: The name to record in the FileHash

        :return FileHash:

        :raises MissingArtifactError:
        """
        try:
            return tags.FileHash.from_file(self._resolve_path(relative_path), filename)
        except FileNotFoundError as ex:
            raise MissingArtifactError('/'.join(relative_path)) from ex
