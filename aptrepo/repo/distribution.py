#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
A distribution contains the meta data for a major grouping of packages
within a :class:Repository, such as all of those used for a major release.

A distribution is split into package lists by "component" (a judgement
grouping, normally based on licensing requirements) and "architecture"
(the CPU type that the package was built for).

Every combination of the configured components and architectures gets a
PackageList, and the Release file lists the size and checksums of every
file those lists write.
"""

import datetime
import email.utils
import logging

from typing import Dict, Iterable, List, Optional, Tuple

from aptrepo import tags
from aptrepo.exceptions import (
    IncorrectChecksumError, MissingArtifactError, SigningError
)

from .abstractrepoobject import AbstractRepoObject
from .package import Package
from .packagelist import PackageList

logger = logging.getLogger(__name__)

CHECKSUM_FIELDS = ['MD5Sum', 'SHA256']

SIGNATURE_FILES = ['InRelease', 'Release.gpg']


def format_date(now: datetime.datetime) -> str:
    """
    Formats a timestamp the way `date -Ru` does

    :param datetime now: An aware datetime, or a naive one in UTC
    :return str:
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=datetime.timezone.utc)

    return email.utils.format_datetime(now.astimezone(datetime.timezone.utc))


class Distribution(AbstractRepoObject):
    """
    A distribution contains the meta data for a major grouping of packages
    within a :class:Repository, such as all of those used for a major release.

    All of the packages in a repo are expected to be compatible with a system,
    although some may conflict directly with each other.
    """

    distribution: str
    _lists: Dict[Tuple[str, str], PackageList]

    # noinspection PyUnresolvedReferences
    def __init__(self, parent: 'aptrepo.repo.Repository', name: str):
        AbstractRepoObject.__init__(self, parent, parent)

        self.distribution = name
        self._lists = {}

    def _path(self, *segments: str) -> List[str]:
        return ['dists', self.distribution] + '/'.join(segments).split('/')

    def exists(self) -> bool:
        """
        Returns whether the distribution currently has a Release file

        :return bool:
        """
        return self._file_exists(self._path('Release'))

    def components(self) -> List[str]:
        return list(self.repo.config.components)

    def architectures(self) -> List[str]:
        return list(self.repo.config.architectures)

    def package_list(self, component: str, architecture: str) -> PackageList:
        """
        Gets the package list for a specific component and architecture
        in the current distribution.

        :param str component:
        :param str architecture:
        :return PackageList:
        """
        key = (component, architecture)

        if key not in self._lists:
            self._lists[key] = PackageList(self.repo, self, component, architecture)

        return self._lists[key]

    def package_lists(self) -> List[PackageList]:
        """
        Returns one package list for every configured component and
        architecture

        :return List[PackageList]:
        """
        return [
            self.package_list(component, architecture)
            for component in self.components()
            for architecture in self.architectures()
        ]

    def tracked_files(self) -> List[str]:
        """
        The files the Release file lists, relative to dists/<codename>/.

        This is an explicit enumeration of what the package lists write,
        never a directory scan.

        :return List[str]:
        """
        files = []

        for package_list in self.package_lists():
            files.extend(package_list.files())

        return files

    def write_indices(self, packages: Iterable[Package]) -> List[str]:
        """
        Regenerates every Packages index from a full pool scan

        :param Iterable[Package] packages: The pool, in scan order
        :return List[str]: The files written, relative to dists/<codename>/
        """
        packages = list(packages)
        written = []

        for package_list in self.package_lists():
            package_list.clear()
            package_list.extend(packages)
            written.extend(package_list.write())

        return written

    def build_release(self, now: Optional[datetime.datetime] = None) -> tags.ReleaseFile:
        """
        Builds the Release file from the index files currently on disk.

        :param datetime now: Defaults to the current time

        :return ReleaseFile:

        :raises MissingArtifactError: If a tracked file is missing and the
            repository is configured as strict
        """
        config = self.repo.config

        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc)

        release = tags.ReleaseFile()

        release['Origin'] = config.origin
        release['Label'] = config.label
        release['Suite'] = config.suite
        release['Codename'] = self.distribution
        release['Date'] = format_date(now)
        release['Architectures'] = ' '.join(self.architectures())
        release['Components'] = ' '.join(self.components())
        release['Description'] = config.description

        for filename in self.tracked_files():
            try:
                release.add_file(self._hash_file(self._path(filename), filename))
            except MissingArtifactError:
                if config.strict:
                    raise

                logger.warning('Skipping missing file %s/%s', self.distribution, filename)

        return release

    def write_release(self, now: Optional[datetime.datetime] = None) -> tags.ReleaseFile:
        """
        Writes the Release file.

        Existing signatures are removed first, as they no longer match.

        :param datetime now: Defaults to the current time
        :return ReleaseFile:
        """
        logger.info('Generating Release for %s', self.distribution)

        release = self.build_release(now)

        for name in SIGNATURE_FILES:
            self._remove_file(self._path(name))

        self._write_file(self._path('Release'), tags.write_tag_file([release]))

        return release

    # noinspection PyUnresolvedReferences
    def sign(self, signer: Optional['aptrepo.signing.Signer']) -> bool:
        """
        Writes Release.gpg and InRelease for the current Release file.

        Both signatures are produced before either is written. Without a
        signer the repository is left unsigned, which is not an error.

        :param Signer signer:
        :return bool: Whether the distribution was signed

        :raises SigningError: After removing any existing signature files
        """
        if signer is None:
            removed = [name for name in SIGNATURE_FILES if self._remove_file(self._path(name))]

            if removed:
                logger.info('Removed stale %s for %s', ', '.join(removed), self.distribution)

            logger.info('Skipping GPG signing for %s (no signing key set)', self.distribution)
            return False

        logger.info('Signing Release for %s', self.distribution)

        release = self._read_file(self._path('Release'))

        try:
            detached = signer.sign(release, detach=True)
            inline = signer.sign(release, detach=False)
        except SigningError:
            for name in SIGNATURE_FILES:
                self._remove_file(self._path(name))
            raise

        self._write_file(self._path('Release.gpg'), detached)
        self._write_file(self._path('InRelease'), inline)

        return True

    # noinspection PyUnresolvedReferences
    def update(
            self,
            packages: Iterable[Package],
            signer: Optional['aptrepo.signing.Signer'] = None,
            now: Optional[datetime.datetime] = None
    ) -> tags.ReleaseFile:
        """
        Regenerates all metadata of this distribution: the indices, the
        Release file and its signatures.

        :param Iterable[Package] packages: The pool, in scan order
        :param Signer signer: None to publish unsigned
        :param datetime now: Defaults to the current time

        :return ReleaseFile:
        """
        self.write_indices(packages)
        release = self.write_release(now)
        self.sign(signer)

        return release

    def release_file(self) -> tags.ReleaseFile:
        """
        Reads and parses the Release file on disk

        :return ReleaseFile:

        :raises MissingArtifactError:
        """
        if not self.exists():
            raise MissingArtifactError('/'.join(self._path('Release')))

        release = next(tags.read_tag_file(self._read_file(self._path('Release')), tags.ReleaseFile), None)

        if release is None:
            raise IncorrectChecksumError('/'.join(self._path('Release')), 'empty Release file')

        return release

    def verify(self) -> tags.ReleaseFile:
        """
        Checks the Release file against the files on disk, and every
        Packages index against the pool files it points to.

        :return ReleaseFile:

        :raises MissingArtifactError:
        :raises IncorrectChecksumError:
        """
        release = self.release_file()
        sections = [set(release.checksum_paths(key)) for key in CHECKSUM_FIELDS]

        if sections[0] != sections[1]:
            raise IncorrectChecksumError(
                '/'.join(self._path('Release')), 'MD5Sum and SHA256 sections list different files'
            )

        for filename, expected in release.files.items():
            actual = self._hash_file(self._path(filename), filename)

            if actual != expected:
                raise IncorrectChecksumError('/'.join(self._path(filename)))

            if filename.endswith('/Packages'):
                self._verify_index(self._read_file(self._path(filename)))

        logger.info('Verified %s (%d files)', self.distribution, len(release.files))

        return release

    def _verify_index(self, data: bytes) -> None:
        for stanza in tags.read_tag_file(data):
            filename = stanza['Filename']
            actual = self._hash_file(filename.split('/'), filename)

            if str(actual.size) != stanza.get('Size') or actual.sha256 != stanza.get('SHA256'):
                raise IncorrectChecksumError(filename)

    def __repr__(self):
        return '<aptrepo.repo.Distribution \'{0.distribution}\' of {0.repo.root}>'.format(self)
