#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Release File wrapper.

The ReleaseFile is the overall meta data file of a :class:aptrepo.repo.Distribution
"""

from typing import Dict, Optional, List

from .tagblock import TagBlock
from .filehash import FileHash


class ReleaseFile(TagBlock):
    """
    Release File wrapper.

    The ReleaseFile is the overall meta data file of a :class:aptrepo.repo.Distribution

    The checksum sections are "magic": they are not stored as text but are
    rendered from `files` whenever they are read, so every section always
    lists the same set of paths.
    """
    files: Dict[str, FileHash]

    def __init__(self):
        super(ReleaseFile, self).__init__()

        self.order_first.extend([
            'Origin', 'Label', 'Suite', 'Codename', 'Date',
            'Architectures', 'Components', 'Description',
        ])

        self.magic.append('MD5Sum')
        self.magic.append('SHA256')

        self.files = {}

    def __setitem__(self, key: str, value: str) -> None:
        if key not in self.magic:
            super(ReleaseFile, self).__setitem__(key, value)
            return

        for line in value.split('\n'):
            if not line.strip():
                continue

            [checksum, size_s, filename] = line.split()
            size: int = int(size_s.strip(), 10)

            if filename not in self.files:
                self.files[filename] = FileHash(filename)
                self.files[filename].size = size

            self.files[filename].__setattr__(key, checksum.strip())

    def __getitem__(self, key: str) -> Optional[str]:
        if key not in self.magic:
            return super(ReleaseFile, self).__getitem__(key)

        output = ['']
        file_list = sorted(self.files.values(), key=lambda f: f.filename)

        for info in file_list:
            if info[key] is None:
                continue

            output.append('{0} {1.size:>16} {1.filename}'.format(info[key], info))

        return '\n'.join(output)

    def add_file(self, file_hash: FileHash) -> None:
        """
        Adds (or replaces) a file in the checksum sections

        :param FileHash file_hash:
        """
        self.files[file_hash.filename] = file_hash

    def checksum_paths(self, key: str) -> List[str]:
        """
        Returns the paths listed in one of the checksum sections

        :param str key: The section name, e.g. "MD5Sum"
        :return List[str]:
        """
        return [info.filename for info in self.files.values() if info[key] is not None]

    def components(self) -> List[str]:
        """
        Returns the list of components as a python List

        :return List[str]:
        """
        return self['Components'].split(' ')

    def architectures(self) -> List[str]:
        """
        Returns the list of architectures as a python List

        :return List[str]:
        """
        return self['Architectures'].split(' ')
