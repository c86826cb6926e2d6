#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Class that represents a complete APT repository

An APT repository is a simple data store generally broken down into two
distinct parts.

The first is the "Pool": an unstructured blob store of all the
.deb package files in the Repository which can be downloaded and
installed onto a machine.

The second is a series of distributions contained structured and signed
metadata about the Packages in the pool, allowing tools to find relevant
packages, do dependency resolution, and then download the packages.
"""

import os
import shutil
import contextlib
import datetime
import logging

from typing import Dict, List, Optional

from aptrepo import deb, tags
from aptrepo.config import RepositoryConfig
from aptrepo.exceptions import ConfigurationError, MetadataExtractionError
from aptrepo.lock import RepositoryLock
from aptrepo.signing import Signer

from .distribution import Distribution
from .package import Package, Identity
from .abstractrepoobject import AbstractRepoObject

logger = logging.getLogger(__name__)

NameStr = str

PUBLIC_KEY_FILE = 'gpg.key'


class Repository(AbstractRepoObject):
    """
    Class that represents a complete APT repository on the local filesystem

    An APT repository is a simple data store generally broken down into two
    distinct parts.

    The first is the "Pool": an unstructured blob store of all the
    .deb package files in the Repository which can be downloaded and
    installed onto a machine.

    The second is a series of distributions contained structured and signed
    metadata about the Packages in the pool, allowing tools to find relevant
    packages, do dependency resolution, and then download the packages.
    """
    root: str
    config: RepositoryConfig
    signer: Optional[Signer]
    extractor: deb.ControlExtractor

    _distributions: Dict[NameStr, Distribution]

    """
    Every package in the pool by (name, version, architecture); populated
    by the first pool scan
    """
    _pool: Optional[Dict[Identity, Package]]

    def __init__(
            self,
            config: RepositoryConfig,
            signer: Optional[Signer] = None,
            extractor: deb.ControlExtractor = deb.extract_control_fields
    ):
        AbstractRepoObject.__init__(self, self, None)

        self.config = config
        self.root = config.root
        self.extractor = extractor

        if signer is None and config.signing_key:
            signer = Signer(config.signing_key, gnupghome=config.gnupghome)

        self.signer = signer

        self._distributions = {}
        self._pool = None

    def distribution(self, distribution: str) -> Distribution:
        """
        Gets a distribution object from this Repo by name.

        Note that the Distribution may not exist yet, you must check that with
        distribution.exists().

        :param str distribution:
        :return Distribution:
        """
        if distribution not in self._distributions:
            self._distributions[distribution] = Distribution(self, distribution)

        return self._distributions[distribution]

    def distributions(self) -> List[Distribution]:
        """
        Returns the configured distributions

        :return List[Distribution]:
        """
        return [self.distribution(name) for name in self.config.codenames]

    def lock(self) -> RepositoryLock:
        """
        Returns the advisory lock for this repository root

        :return RepositoryLock:
        """
        return RepositoryLock(self.root, timeout=self.config.lock_timeout)

    def pool_path(self, control: tags.TagBlock, basename: str) -> List[str]:
        """
        Gets the pool location for a package

        :param TagBlock control: The control fields of the package
        :param str basename: The file name to store the package under

        :return List[str]: pool/<component>/<first-letter>/<name>/<basename>
        """
        name = control['Package']

        return ['pool', self.config.pool_component, name[0], name, basename]

    def _load_package(self, relative_path: List[str]) -> Package:
        filename = '/'.join(relative_path)
        control = self.extractor(self._resolve_path(relative_path))
        hashes = self._hash_file(relative_path, filename)

        return Package(self, control, hashes)

    def _pool_files(self) -> List[List[str]]:
        pool_root = self._resolve_path(['pool'])
        found = []

        for component in self.config.components:
            component_root = os.path.join(pool_root, component)

            for directory, directories, files in os.walk(component_root):
                directories.sort()

                for name in files:
                    if not name.endswith('.deb'):
                        continue

                    relative = os.path.relpath(os.path.join(directory, name), self.root)
                    found.append(relative.split(os.sep))

        return sorted(found, key='/'.join)

    def _scan(self) -> Dict[Identity, Package]:
        if self._pool is not None:
            return self._pool

        self._pool = {}

        for relative_path in self._pool_files():
            try:
                package = self._load_package(relative_path)
            except MetadataExtractionError as ex:
                logger.warning('Skipping %s', ex)
                continue

            if package.identity in self._pool:
                logger.warning(
                    'Ignoring %s: %s %s (%s) is already provided by %s',
                    package['Filename'], *package.identity,
                    self._pool[package.identity]['Filename']
                )
                continue

            self._pool[package.identity] = package

        return self._pool

    def rescan(self) -> None:
        """
        Forgets the cached pool contents, so that the next scan reads the
        pool directory again
        """
        self._pool = None

    def scan_pool(self) -> List[Package]:
        """
        Returns every package in the pool in lexicographic path order

        :return List[Package]:
        """
        return sorted(self._scan().values(), key=lambda package: package['Filename'])

    def package(self, name: str, version: str, architecture: str) -> Optional[Package]:
        """
        Gets a package from the pool by its identity

        :return Package:
        """
        return self._scan().get((name, version, architecture))

    def adopt(self, path: str) -> Package:
        """
        Add a .deb file to this repo's pool.

        The pool location is derived from the control data inside the
        package, never from the file name. Adopting the same file again
        is a no-op; a package whose identity is already in the pool under
        another file name is not copied, and the existing entry is returned.

        :param str path: The .deb file to adopt

        :return Package: The pool entry for the package

        :raises MetadataExtractionError:
        """
        pool = self._scan()
        control = self.extractor(path)
        identity = (control['Package'], control['Version'], control['Architecture'])

        relative_path = self.pool_path(control, os.path.basename(path))
        filename = '/'.join(relative_path)
        destination = self._resolve_path(relative_path)

        if identity in pool and pool[identity]['Filename'] != filename:
            logger.warning(
                'Ignoring %s: %s %s (%s) is already in the pool as %s',
                path, *identity, pool[identity]['Filename']
            )
            return pool[identity]

        source_hash = tags.FileHash.from_file(path, filename)

        if os.path.exists(destination):
            if os.path.samefile(path, destination) or tags.FileHash.from_file(destination) == source_hash:
                logger.debug('%s is already in the pool', filename)
                package = Package(self, control, source_hash)
                pool[identity] = package
                return package

            logger.warning('Replacing %s with a different build', filename)

        os.makedirs(os.path.dirname(destination), exist_ok=True)

        try:
            shutil.copyfile(path, destination + '.tmp')
            os.replace(destination + '.tmp', destination)
        finally:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(destination + '.tmp')

        package = Package(self, control, source_hash)

        # Drop any entry whose identity changed along with the file content
        for existing, entry in list(pool.items()):
            if entry['Filename'] == filename:
                del pool[existing]

        pool[identity] = package

        logger.info('Added: %s', os.path.basename(path))

        return package

    def adopt_directory(self, source_dir: str) -> List[Package]:
        """
        Adopts every .deb below a directory, in lexicographic path order.

        Files whose control data cannot be read are skipped with a warning.

        :param str source_dir:

        :return List[Package]: The pool entries of the adopted packages

        :raises ConfigurationError: If the directory does not exist
        """
        if not os.path.isdir(source_dir):
            raise ConfigurationError(source_dir, 'is not a directory')

        logger.info('Copying packages from %s to pool', source_dir)

        candidates = []

        for directory, _, files in os.walk(source_dir):
            candidates.extend(os.path.join(directory, name) for name in files if name.endswith('.deb'))

        adopted = []

        for path in sorted(candidates):
            try:
                adopted.append(self.adopt(path))
            except MetadataExtractionError as ex:
                logger.warning('Skipping %s', ex)

        return adopted

    def export_public_key(self) -> Optional[str]:
        """
        Writes gpg.key at the repository root when signing is configured,
        and removes a stale copy otherwise.

        :return str: The path written, if any

        :raises SigningError:
        """
        if self.signer is None:
            self._remove_file([PUBLIC_KEY_FILE])
            return None

        logger.info('Exporting public key')

        return self._write_file([PUBLIC_KEY_FILE], self.signer.export_public_key().encode('ascii'))

    def update(
            self,
            source_dir: Optional[str] = None,
            now: Optional[datetime.datetime] = None
    ) -> List[Distribution]:
        """
        Runs a full update cycle under the repository lock: adopt new
        packages, regenerate every index and Release file, sign, and export
        the public key.

        :param str source_dir: Directory of .deb files to add, if any
        :param datetime now: Timestamp for the Release files

        :return List[Distribution]:

        :raises RepositoryLockedError:
        :raises SigningError:
        :raises MissingArtifactError:
        """
        with self.lock():
            self.rescan()

            if source_dir is not None:
                self.adopt_directory(source_dir)

            packages = self.scan_pool()
            distributions = self.distributions()

            for distribution in distributions:
                distribution.update(packages, self.signer, now)

            self.export_public_key()

        logger.info('Repository updated: %d packages, %d distributions', len(packages), len(distributions))

        return distributions

    def verify(self) -> None:
        """
        Verifies every configured distribution against the files on disk

        :raises MissingArtifactError:
        :raises IncorrectChecksumError:
        """
        for distribution in self.distributions():
            distribution.verify()

    def __repr__(self) -> str:
        return \
            '<aptrepo.repo.Repository {0.root} (distributions: [{1}]; {2} packages)>'.format(
                self, ', '.join(self._distributions.keys()), len(self._pool or {})
            )
