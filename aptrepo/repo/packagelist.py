#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
The Packages index of one component and architecture of a distribution
"""

import gzip
import lzma
import logging

from typing import Iterable, Iterator, List

from aptrepo import tags

from .abstractrepoobject import AbstractRepoObject
from .package import Package

logger = logging.getLogger(__name__)

ARCH_ALL = 'all'

INDEX_FILES = ['Packages', 'Packages.gz', 'Packages.xz', 'Release']


class PackageList(AbstractRepoObject):
    """
    The Packages index of one component and architecture of a distribution.

    Only packages built for the list's architecture, or for "all", are
    accepted. Packages are written in the order they were added.
    """

    component: str
    architecture: str
    _packages: List[Package]

    # noinspection PyUnresolvedReferences
    def __init__(
            self,
            repository: 'aptrepo.repo.Repository',
            distribution: 'aptrepo.repo.Distribution',
            component: str,
            architecture: str
    ):
        AbstractRepoObject.__init__(self, repository, distribution)

        self.distribution = distribution
        self.component = component
        self.architecture = architecture
        self._packages = []

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages)

    def __len__(self) -> int:
        return len(self._packages)

    def accepts(self, package: Package) -> bool:
        """
        Whether a package belongs in this list

        :param Package package:
        :return bool:
        """
        if package.component != self.component:
            return False

        return package.architecture in (self.architecture, ARCH_ALL)

    def add(self, package: Package) -> bool:
        """
        Adds a package to this PackageList if it matches the component and
        architecture

        :param Package package:
        :return bool: Whether the package was added
        """
        if not self.accepts(package):
            return False

        self._packages.append(package)

        return True

    def extend(self, packages: Iterable[Package]) -> int:
        """
        Adds every matching package

        :param Iterable[Package] packages:
        :return int: The number of packages added
        """
        return sum(1 for package in packages if self.add(package))

    def clear(self) -> None:
        self._packages = []

    def directory(self) -> List[str]:
        """
        Returns the directory of this index relative to dists/<codename>/

        :return List[str]:
        """
        return [self.component, 'binary-{0}'.format(self.architecture)]

    def files(self) -> List[str]:
        """
        Returns the files this index writes, relative to dists/<codename>/

        :return List[str]:
        """
        return ['/'.join(self.directory() + [name]) for name in INDEX_FILES]

    def render(self) -> bytes:
        """
        Renders the Packages file

        :return bytes:
        """
        return tags.write_tag_file(self._packages)

    def release_stanza(self) -> tags.TagBlock:
        """
        Builds the per-index Release stanza

        :return TagBlock:
        """
        config = self.repo.config
        stanza = tags.TagBlock()

        stanza['Archive'] = config.suite
        stanza['Component'] = self.component
        stanza['Origin'] = config.origin
        stanza['Label'] = config.label
        stanza['Architecture'] = self.architecture

        return stanza

    def write(self) -> List[str]:
        """
        Writes Packages, its compressed copies and the per-index Release

        :return List[str]: The files written, relative to dists/<codename>/
        """
        base = ['dists', self.distribution.distribution] + self.directory()
        data = self.render()

        logger.info(
            'Generating Packages for %s/%s/%s (%d packages)',
            self.distribution.distribution, self.component, self.architecture, len(self)
        )

        self._write_file(base + ['Packages'], data)
        self._write_file(base + ['Packages.gz'], gzip.compress(data, compresslevel=9, mtime=0))
        self._write_file(base + ['Packages.xz'], lzma.compress(data))
        self._write_file(base + ['Release'], tags.write_tag_file([self.release_stanza()]))

        return self.files()

    def __repr__(self):
        return '<aptrepo.repo.PackageList {0}/{1.component}/binary-{1.architecture} ({2} packages)>'.format(
            self.distribution.distribution, self, len(self)
        )
