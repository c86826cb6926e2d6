#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
All of the types of exception for APT repository assembly and publishing.

Every exception carries the artifact, file or key it concerns, and its
str() is a one line diagnostic naming it.
"""

from typing import Optional


class RepositoryError(Exception):
    """
    Base class for every error raised while assembling or publishing
    a repository
    """


class MetadataExtractionError(RepositoryError):
    """
    The control metadata of a package could not be read, either because
    the file is corrupt or because it is not a Debian package.

    Raised per artifact; callers skip the file and carry on.
    """

    path: str
    reason: str

    def __init__(self, path: str, reason: str):
        super(MetadataExtractionError, self).__init__(
            'Unable to read control data from {0}: {1}'.format(path, reason)
        )

        self.path = path
        self.reason = reason


class MissingArtifactError(RepositoryError):
    """
    A file that should be listed in a Release file is not on disk
    """

    path: str

    def __init__(self, path: str):
        super(MissingArtifactError, self).__init__(
            'Tracked file is missing: {0}'.format(path)
        )

        self.path = path


class IncorrectChecksumError(RepositoryError):
    """
    A file on disk does not match the size or digest recorded for it
    """

    path: str

    def __init__(self, path: str, detail: str = ''):
        super(IncorrectChecksumError, self).__init__(
            'Invalid checksum for {0}{1}'.format(path, ' ({0})'.format(detail) if detail else '')
        )

        self.path = path


class SigningError(RepositoryError):
    """
    A signing key was configured but the signature could not be produced
    """

    key_id: Optional[str]
    reason: str

    def __init__(self, key_id: Optional[str], reason: str):
        super(SigningError, self).__init__(
            'Signing with key {0} failed: {1}'.format(key_id or '<default>', reason)
        )

        self.key_id = key_id
        self.reason = reason


class UploadError(RepositoryError):
    """
    An object could not be uploaded to, or deleted from, the remote store
    """

    key: str
    reason: str

    def __init__(self, key: str, reason: str):
        super(UploadError, self).__init__(
            'Upload of {0} failed: {1}'.format(key, reason)
        )

        self.key = key
        self.reason = reason


class RepositoryLockedError(RepositoryError):
    """
    Another process holds the lock on the repository root
    """

    path: str

    def __init__(self, path: str):
        super(RepositoryLockedError, self).__init__(
            'Repository is locked by another process: {0}'.format(path)
        )

        self.path = path


class ConfigurationError(RepositoryError):
    """
    A required setting is missing or invalid
    """

    variable: str

    def __init__(self, variable: str, reason: str = 'is required'):
        super(ConfigurationError, self).__init__('{0} {1}'.format(variable, reason))

        self.variable = variable
