from __future__ import annotations

import datetime
from pathlib import Path
from typing import List, Optional

import pytest

from aptrepo.config import RepositoryConfig
from aptrepo.exceptions import SigningError
from aptrepo.repo import Repository
from tests._fixtures.debbuilder import DebBuilder

FIXED_NOW = datetime.datetime(2026, 10, 17, 12, 0, 0, tzinfo=datetime.timezone.utc)


class FakeSigner:
    """Stands in for aptrepo.signing.Signer without touching gpg."""

    def __init__(self, key_id: str = 'TESTKEY', fail: bool = False) -> None:
        self.key_id = key_id
        self.fail = fail
        self.calls: List[bool] = []

    def sign(self, data: bytes, detach: bool) -> bytes:
        self.calls.append(detach)

        if self.fail:
            raise SigningError(self.key_id, 'secret key not found')

        if detach:
            return b'-----BEGIN PGP SIGNATURE-----\nfake\n-----END PGP SIGNATURE-----\n'

        return (
            b'-----BEGIN PGP SIGNED MESSAGE-----\nHash: SHA512\n\n'
            + data
            + b'-----BEGIN PGP SIGNATURE-----\nfake\n-----END PGP SIGNATURE-----\n'
        )

    def export_public_key(self) -> str:
        return '-----BEGIN PGP PUBLIC KEY BLOCK-----\nfake\n-----END PGP PUBLIC KEY BLOCK-----\n'


@pytest.fixture
def debs(tmp_path: Path) -> DebBuilder:
    """Builder writing .deb files into an incoming directory."""
    return DebBuilder(tmp_path / 'incoming')


@pytest.fixture
def config(tmp_path: Path) -> RepositoryConfig:
    return RepositoryConfig(root=str(tmp_path / 'repo'), codenames=('noble', 'bookworm'))


@pytest.fixture
def make_repository(config: RepositoryConfig):
    def factory(signer: Optional[FakeSigner] = None, **overrides) -> Repository:
        if overrides:
            values = dict(config.__dict__)
            values.update(overrides)
            return Repository(RepositoryConfig(**values), signer=signer)

        return Repository(config, signer=signer)

    return factory


@pytest.fixture
def repository(make_repository) -> Repository:
    return make_repository()
