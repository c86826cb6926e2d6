#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Class representing the sizes and hashes APT expects for a file.
"""

import hashlib

from typing import Optional

_BLOCK_SIZE = 65536


class FileHash:
    """
    Class representing the sizes and hashes APT expects for a file.

    Attribute access is case insensitive and ignores a "sum" suffix, so
    the field names used in Packages ("MD5sum") and Release ("MD5Sum")
    files both map onto `md5`.
    """

    filename: str
    size: Optional[int] = None
    md5: Optional[str] = None
    sha1: Optional[str] = None
    sha256: Optional[str] = None

    def __init__(self, filename: str):
        self.filename = filename

    def __setattr__(self, key: str, value):
        key = key.lower().replace('sum', '')

        return object.__setattr__(self, key, value)

    def __getattr__(self, key: str):
        key = key.lower().replace('sum', '')

        return object.__getattribute__(self, key)

    def __getitem__(self, key: str):
        key = key.lower().replace('sum', '')

        return object.__getattribute__(self, key)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FileHash):
            return NotImplemented

        return (self.size, self.md5, self.sha256) == (other.size, other.md5, other.sha256)

    def __repr__(self) -> str:
        return '<aptrepo.tags.FileHash {0.filename} ({0.size} bytes)>'.format(self)

    @classmethod
    def from_file(cls, path: str, filename: Optional[str] = None) -> 'FileHash':
        """
        Hashes a file on disk.

        :param str path: The location of the file to read
        :param str filename: The name to record, defaults to the path

        :return FileHash:

        :raises FileNotFoundError:
        """
        md5 = hashlib.md5()
        sha1 = hashlib.sha1()
        sha256 = hashlib.sha256()
        size = 0

        with open(path, 'rb') as stream:
            for block in iter(lambda: stream.read(_BLOCK_SIZE), b''):
                md5.update(block)
                sha1.update(block)
                sha256.update(block)
                size += len(block)

        file_hash = cls(filename if filename is not None else path)
        file_hash.size = size
        file_hash.md5 = md5.hexdigest()
        file_hash.sha1 = sha1.hexdigest()
        file_hash.sha256 = sha256.hexdigest()

        return file_hash

    @classmethod
    def from_bytes(cls, data: bytes, filename: str) -> 'FileHash':
        """
        Hashes an in-memory buffer

        :param bytes data:
        :param str filename:
        :return FileHash:
        """
        file_hash = cls(filename)
        file_hash.size = len(data)
        file_hash.md5 = hashlib.md5(data).hexdigest()
        file_hash.sha1 = hashlib.sha1(data).hexdigest()
        file_hash.sha256 = hashlib.sha256(data).hexdigest()

        return file_hash
