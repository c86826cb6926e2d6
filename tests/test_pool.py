"""Tests for adopting packages into the pool."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from aptrepo.exceptions import ConfigurationError, MetadataExtractionError
from aptrepo.repo import Repository
from tests._fixtures.debbuilder import DebBuilder


def test_adopt_places_package_by_control_name(repository: Repository, debs: DebBuilder) -> None:
    path = debs.write('rustypanel-php', '8.3.1', 'amd64', filename='php-build-output.deb')

    package = repository.adopt(str(path))

    expected = Path(repository.root) / 'pool/main/r/rustypanel-php/php-build-output.deb'
    assert expected.read_bytes() == path.read_bytes()
    assert package['Filename'] == 'pool/main/r/rustypanel-php/php-build-output.deb'
    assert package['Size'] == str(path.stat().st_size)
    assert package.identity == ('rustypanel-php', '8.3.1', 'amd64')


def test_adopt_is_idempotent(repository: Repository, debs: DebBuilder) -> None:
    path = debs.write('redis', '7.4.0', 'amd64')

    first = repository.adopt(str(path))
    destination = Path(first.path)
    modified = destination.stat().st_mtime_ns
    second = repository.adopt(str(path))

    assert second['Filename'] == first['Filename']
    assert destination.stat().st_mtime_ns == modified
    assert len(repository.scan_pool()) == 1


def test_adopting_pool_file_onto_itself_is_a_noop(repository: Repository, debs: DebBuilder) -> None:
    package = repository.adopt(str(debs.write('haproxy', '3.0', 'arm64')))

    again = repository.adopt(package.path)

    assert again['SHA256'] == package['SHA256']


def test_duplicate_identity_under_other_name_is_ignored(
        repository: Repository, debs: DebBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    debs.write('nginx', '1.27', 'amd64', filename='a/nginx.deb')
    debs.write('nginx', '1.27', 'amd64', filename='b/nginx-copy.deb', payload=b'different\n')

    with caplog.at_level(logging.WARNING):
        adopted = repository.adopt_directory(str(debs.root))

    pool = Path(repository.root) / 'pool/main/n/nginx'
    assert sorted(p.name for p in pool.iterdir()) == ['nginx.deb']
    assert [package['Filename'] for package in adopted] == ['pool/main/n/nginx/nginx.deb'] * 2
    assert 'already in the pool' in caplog.text


def test_rebuilt_file_with_same_name_replaces_pool_copy(repository: Repository, debs: DebBuilder) -> None:
    debs.write('varnish', '7.5', 'amd64', payload=b'first\n')
    repository.adopt_directory(str(debs.root))

    path = debs.write('varnish', '7.5', 'amd64', payload=b'second build\n')
    package = repository.adopt(str(path))

    assert Path(package.path).read_bytes() == path.read_bytes()
    assert len(repository.scan_pool()) == 1


def test_corrupt_file_is_skipped_with_warning(
        repository: Repository, debs: DebBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    debs.write('mysql', '8.4', 'amd64')
    debs.write_raw('corrupt.deb', b'!<arch>\ngarbage')

    with caplog.at_level(logging.WARNING):
        adopted = repository.adopt_directory(str(debs.root))

    assert [package.name for package in adopted] == ['mysql']
    assert 'corrupt.deb' in caplog.text


def test_adopt_raises_for_corrupt_file(repository: Repository, debs: DebBuilder) -> None:
    with pytest.raises(MetadataExtractionError):
        repository.adopt(str(debs.write_raw('bad.deb', b'nope')))


def test_adopt_directory_requires_directory(repository: Repository, tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        repository.adopt_directory(str(tmp_path / 'missing'))


def test_scan_pool_is_lexicographic_and_skips_unreadable(repository: Repository, debs: DebBuilder) -> None:
    for name in ('zlib-tools', 'apache2', 'mariadb'):
        repository.adopt(str(debs.write(name, '1.0', 'amd64')))

    junk = Path(repository.root) / 'pool/main/j/junk/junk.deb'
    junk.parent.mkdir(parents=True)
    junk.write_bytes(b'not a package')
    repository.rescan()

    filenames = [package['Filename'] for package in repository.scan_pool()]

    assert filenames == sorted(filenames)
    assert [f.split('/')[3] for f in filenames] == ['apache2', 'mariadb', 'zlib-tools']


def test_package_lookup_by_identity(repository: Repository, debs: DebBuilder) -> None:
    repository.adopt(str(debs.write('postgresql-17', '17.2', 'arm64')))

    assert repository.package('postgresql-17', '17.2', 'arm64') is not None
    assert repository.package('postgresql-17', '17.2', 'amd64') is None


@pytest.mark.parametrize('name', ['../../../escaped', 'Upper-Case', 'a', 'sub/dir'])
def test_invalid_package_name_is_rejected(repository: Repository, debs: DebBuilder, name: str) -> None:
    path = debs.write(name, '1.0', 'amd64', filename='crafted.deb')

    with pytest.raises(MetadataExtractionError):
        repository.adopt(str(path))

    escaped = [p for p in Path(repository.root).parent.rglob('crafted.deb') if p != path]
    assert escaped == []


def test_invalid_package_name_is_skipped_in_directory(
        repository: Repository, debs: DebBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    debs.write('nginx', '1.27.0', 'amd64')
    debs.write('../escaped', '1.0', 'amd64', filename='crafted.deb')

    with caplog.at_level(logging.WARNING):
        adopted = repository.adopt_directory(str(debs.root))

    assert [package.name for package in adopted] == ['nginx']
    assert 'crafted.deb' in caplog.text


def test_failed_copy_leaves_no_temporary_file(
        repository: Repository, debs: DebBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = debs.write('haproxy', '3.0', 'amd64')

    def fail(source, destination):
        raise OSError('disk full')

    monkeypatch.setattr('aptrepo.repo.repository.os.replace', fail)

    with pytest.raises(OSError):
        repository.adopt(str(path))

    assert list(Path(repository.root).rglob('*.tmp')) == []
