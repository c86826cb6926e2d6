#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
APT transport for a local OS accessible filesystem
"""

import os
import shutil
import contextlib
import urllib.parse

from typing import Dict

from aptrepo import tags
from aptrepo.exceptions import UploadError
from aptrepo.transport.base import URIMismatchError, RemoteObject
from aptrepo.transport.transport import Transport


class File(Transport):
    """
    APT transport for a local OS accessible filesystem.

    Mirrors the repository into a directory; content types are not
    recorded.
    """
    root: str

    def __init__(self, uri: str):
        url: urllib.parse.ParseResult = urllib.parse.urlparse(uri)

        if url.scheme not in ('file', ''):
            raise URIMismatchError("Scheme must be file:")

        self.root = urllib.parse.unquote(url.path)

    def _path(self, key: str) -> str:
        return os.path.join(self.root, *key.split('/'))

    def list_objects(self) -> Dict[str, RemoteObject]:
        """
        Returns every file below the target directory

        :return Dict[str, RemoteObject]:
        """
        objects = {}

        for directory, _, files in os.walk(self.root):
            for name in files:
                path = os.path.join(directory, name)
                key = os.path.relpath(path, self.root).replace(os.sep, '/')
                file_hash = tags.FileHash.from_file(path, key)

                objects[key] = RemoteObject(key, file_hash.size, file_hash.md5)

        return objects

    def upload(self, source: str, key: str, content_type: str) -> None:
        path = self._path(key)

        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            shutil.copyfile(source, path + '.tmp')
            os.replace(path + '.tmp', path)
        except OSError as ex:
            raise UploadError(key, str(ex)) from ex
        finally:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(path + '.tmp')

    def delete(self, key: str) -> None:
        try:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(self._path(key))
        except OSError as ex:
            raise UploadError(key, str(ex)) from ex

    def __repr__(self) -> str:
        return '<aptrepo.transports.File {0}>'.format(self.root)
