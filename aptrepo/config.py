#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Immutable configuration for repository assembly and publishing.

Both configurations can be built from an environment mapping, which is how
the build pipeline hands over settings; nothing reads os.environ after
start up.
"""

import os
import dataclasses

from typing import Mapping, Optional, Tuple

from aptrepo.exceptions import ConfigurationError

DEFAULT_CODENAMES = ('noble', 'jammy', 'trixie', 'bookworm')
DEFAULT_COMPONENTS = ('main',)
DEFAULT_ARCHITECTURES = ('amd64', 'arm64')

R2_ENDPOINT = 'https://{0}.r2.cloudflarestorage.com'


def _split(value: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value or not value.strip():
        return default

    return tuple(value.replace(',', ' ').split())


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value == '':
        return default

    return value.strip().lower() not in ('0', 'false', 'no', 'off')


@dataclasses.dataclass(frozen=True)
class RepositoryConfig:
    """
    Settings for building a repository tree
    """
    root: str
    codenames: Tuple[str, ...] = DEFAULT_CODENAMES
    components: Tuple[str, ...] = DEFAULT_COMPONENTS
    architectures: Tuple[str, ...] = DEFAULT_ARCHITECTURES
    origin: str = 'RustyPanel'
    label: str = 'RustyPanel'
    suite: str = 'stable'
    description: str = 'RustyPanel Package Repository'
    signing_key: Optional[str] = None
    gnupghome: Optional[str] = None
    strict: bool = True
    lock_timeout: float = 30.0

    def __post_init__(self):
        for name in ('codenames', 'components', 'architectures'):
            if not getattr(self, name):
                raise ConfigurationError(name, 'must not be empty')

        if 'all' in self.architectures:
            raise ConfigurationError('architectures', 'must not contain "all"')

    @property
    def pool_component(self) -> str:
        """
        The component new packages are placed in
        """
        return self.components[0]

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None,
                     root: Optional[str] = None) -> 'RepositoryConfig':
        """
        Builds the configuration from environment variables.

        :param Mapping environ: Defaults to os.environ
        :param str root: Overrides REPO_DIR

        :return RepositoryConfig:

        :raises ConfigurationError:
        """
        if environ is None:
            environ = os.environ

        root = root or environ.get('REPO_DIR') or os.path.join(os.getcwd(), 'repo')

        return cls(
            root=os.path.abspath(root),
            codenames=_split(environ.get('APT_CODENAMES'), DEFAULT_CODENAMES),
            components=_split(environ.get('APT_COMPONENTS'), DEFAULT_COMPONENTS),
            architectures=_split(environ.get('APT_ARCHITECTURES'), DEFAULT_ARCHITECTURES),
            origin=environ.get('APT_ORIGIN') or cls.origin,
            label=environ.get('APT_LABEL') or cls.label,
            suite=environ.get('APT_SUITE') or cls.suite,
            description=environ.get('APT_DESCRIPTION') or cls.description,
            signing_key=environ.get('GPG_KEY_ID') or None,
            gnupghome=environ.get('GNUPGHOME') or None,
            strict=_flag(environ.get('APT_STRICT'), True),
        )


@dataclasses.dataclass(frozen=True)
class PublishConfig:
    """
    Settings for mirroring a repository tree to object storage
    """
    uri: str
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = dataclasses.field(default=None, repr=False)
    secret_access_key: Optional[str] = dataclasses.field(default=None, repr=False)
    region: str = 'auto'

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None,
                     uri: Optional[str] = None) -> 'PublishConfig':
        """
        Builds the configuration from environment variables.

        An explicit `uri` (or PUBLISH_URI) of a non-S3 target needs no
        credentials; otherwise the R2_* variables are all required.

        :param Mapping environ: Defaults to os.environ
        :param str uri: Overrides PUBLISH_URI

        :return PublishConfig:

        :raises ConfigurationError: Naming the first missing variable
        """
        if environ is None:
            environ = os.environ

        uri = uri or environ.get('PUBLISH_URI')

        if uri and not uri.startswith('s3://'):
            return cls(uri=uri)

        values = {}

        for variable in ('R2_ACCOUNT_ID', 'R2_ACCESS_KEY_ID', 'R2_SECRET_ACCESS_KEY', 'R2_BUCKET_NAME'):
            if not environ.get(variable):
                raise ConfigurationError(variable)

            values[variable] = environ[variable]

        return cls(
            uri=uri or 's3://{0}/'.format(values['R2_BUCKET_NAME']),
            endpoint_url=R2_ENDPOINT.format(values['R2_ACCOUNT_ID']),
            access_key_id=values['R2_ACCESS_KEY_ID'],
            secret_access_key=values['R2_SECRET_ACCESS_KEY'],
        )
