"""Tests for Packages index generation."""

from __future__ import annotations

import gzip
import lzma
from pathlib import Path

from aptrepo import tags
from aptrepo.repo import Repository
from tests._fixtures.debbuilder import DebBuilder


def _index(repository: Repository, codename: str, arch: str, name: str = 'Packages') -> Path:
    return Path(repository.root) / 'dists' / codename / 'main' / 'binary-{0}'.format(arch) / name


def _stanzas(path: Path):
    return list(tags.read_tag_file(path.read_bytes()))


def test_architecture_filtering(repository: Repository, debs: DebBuilder) -> None:
    debs.write('pkga', '1.0', 'amd64')
    debs.write('pkgb', '2.0', 'all')

    repository.update(str(debs.root))

    amd64 = _stanzas(_index(repository, 'noble', 'amd64'))
    arm64 = _stanzas(_index(repository, 'noble', 'arm64'))

    assert [stanza['Package'] for stanza in amd64] == ['pkga', 'pkgb']
    assert [stanza['Package'] for stanza in arm64] == ['pkgb']


def test_other_architectures_never_leak(repository: Repository, debs: DebBuilder) -> None:
    debs.write('only-arm', '1.0', 'arm64')
    debs.write('only-riscv', '1.0', 'riscv64')

    repository.update(str(debs.root))

    assert _stanzas(_index(repository, 'noble', 'amd64')) == []
    assert [s['Package'] for s in _stanzas(_index(repository, 'noble', 'arm64'))] == ['only-arm']


def test_stanza_keeps_control_fields_and_adds_pool_fields(repository: Repository, debs: DebBuilder) -> None:
    source = debs.write('rustypanel-php', '8.3.1', 'amd64')

    repository.update(str(debs.root))

    stanza = _stanzas(_index(repository, 'noble', 'amd64'))[0]
    digest = tags.FileHash.from_file(str(source))

    assert stanza.keys()[:4] == ['Package', 'Version', 'Architecture', 'Maintainer']
    assert stanza['Description'].split('\n')[2] == '.'
    assert stanza['Filename'] == 'pool/main/r/rustypanel-php/rustypanel-php_8.3.1_amd64.deb'
    assert stanza['Size'] == str(digest.size)
    assert stanza['MD5sum'] == digest.md5
    assert stanza['SHA256'] == digest.sha256


def test_empty_pool_gives_empty_index(repository: Repository) -> None:
    repository.update()

    for arch in ('amd64', 'arm64'):
        assert _index(repository, 'noble', arch).read_bytes() == b''
        assert gzip.decompress(_index(repository, 'noble', arch, 'Packages.gz').read_bytes()) == b''


def test_compressed_copies_match(repository: Repository, debs: DebBuilder) -> None:
    debs.write('caddy', '2.8.4', 'amd64')
    repository.update(str(debs.root))

    plain = _index(repository, 'bookworm', 'amd64').read_bytes()

    assert gzip.decompress(_index(repository, 'bookworm', 'amd64', 'Packages.gz').read_bytes()) == plain
    assert lzma.decompress(_index(repository, 'bookworm', 'amd64', 'Packages.xz').read_bytes()) == plain


def test_indices_are_reproducible(repository: Repository, debs: DebBuilder) -> None:
    debs.write('a-pkg', '1', 'amd64')
    debs.write('b-pkg', '1', 'all')
    repository.update(str(debs.root))

    names = ('Packages', 'Packages.gz', 'Packages.xz', 'Release')
    first = {name: _index(repository, 'noble', 'amd64', name).read_bytes() for name in names}
    repository.update()
    second = {name: _index(repository, 'noble', 'amd64', name).read_bytes() for name in names}

    assert first == second


def test_per_index_release_stanza(repository: Repository) -> None:
    repository.update()

    stanza = _stanzas(_index(repository, 'noble', 'arm64', 'Release'))[0]

    assert stanza['Archive'] == 'stable'
    assert stanza['Component'] == 'main'
    assert stanza['Architecture'] == 'arm64'


def test_package_list_accepts(repository: Repository, debs: DebBuilder) -> None:
    package = repository.adopt(str(debs.write('pkgb', '2.0', 'all')))
    distribution = repository.distribution('noble')

    assert distribution.package_list('main', 'amd64').accepts(package)
    assert distribution.package_list('main', 'arm64').accepts(package)
    assert not distribution.package_list('contrib', 'amd64').accepts(package)
