#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
A single .deb in the pool of a repository, with its control data
"""

from typing import Optional, Tuple

from aptrepo import tags

from .abstractrepoobject import AbstractRepoObject

Identity = Tuple[str, str, str]


class Package(AbstractRepoObject, tags.TagBlock):
    """
    A single .deb in the pool of a repository.

    The control fields are kept exactly as they appear in the package;
    the pool location, size and checksums are "magic" fields backed by
    a :class:FileHash and are always written at the end of the stanza,
    replacing any copy found in the control file.
    """
    _hashes: tags.FileHash

    # noinspection PyUnresolvedReferences
    def __init__(
            self,
            repository: 'aptrepo.repo.Repository',
            control: tags.TagBlock,
            hashes: tags.FileHash
    ):
        AbstractRepoObject.__init__(self, repository, repository)
        tags.TagBlock.__init__(self)

        self.required.extend(['Package', 'Version', 'Architecture'])

        self.magic.append('Filename')
        self.magic.append('Size')
        self.magic.append('MD5sum')
        self.magic.append('SHA1')
        self.magic.append('SHA256')

        self._hashes = hashes

        for key in control.keys():
            if key in self.magic:
                continue

            self[key] = control[key]

    @property
    def name(self) -> str:
        return self['Package']

    @property
    def version(self) -> str:
        return self['Version']

    @property
    def architecture(self) -> str:
        return self['Architecture']

    @property
    def identity(self) -> Identity:
        """
        The (name, version, architecture) triple that identifies a package
        """
        return self.name, self.version, self.architecture

    @property
    def component(self) -> str:
        """
        The pool component this package was placed in
        """
        return self['Filename'].split('/')[1]

    @property
    def path(self) -> str:
        """
        Absolute path of the pool file
        """
        return self._resolve_path(self['Filename'].split('/'))

    def hashes(self) -> tags.FileHash:
        """
        Gets the FileHash object for this package

        :return FileHash:
        """
        return self._hashes

    def __setitem__(self, key: str, value: str) -> None:
        if key not in self.magic:
            tags.TagBlock.__setitem__(self, key, value)
        elif key == 'Size':
            self._hashes.size = int(value)
        else:
            self._hashes.__setattr__(key, value)

    def __getitem__(self, key: str) -> Optional[str]:
        if key not in self.magic:
            return tags.TagBlock.__getitem__(self, key)

        value = self._hashes[key]

        return None if value is None else str(value)

    def __repr__(self):
        return "<aptrepo.repo.Package {0[Package]}={0[Version]} ({0[Architecture]})>".format(self)
