"""Tests for aptrepo.tags."""

from __future__ import annotations

from aptrepo import tags
from tests._fixtures.debbuilder import control_text


def test_control_block_round_trips_unchanged() -> None:
    text = control_text('rustypanel-php', '8.3.1', 'amd64', Depends='libc6 (>= 2.34), libssl3')

    block = next(tags.read_tag_file(text.encode('utf-8')))

    assert block['Package'] == 'rustypanel-php'
    assert block['Depends'] == 'libc6 (>= 2.34), libssl3'
    assert tags.write_tag_file([block]).decode('utf-8') == text


def test_field_order_is_preserved() -> None:
    data = b'Package: b\nVersion: 1\nArchitecture: all\nZ-Custom: last\nA-Custom: first\n'

    block = next(tags.read_tag_file(data))

    assert block.keys() == ['Package', 'Version', 'Architecture', 'Z-Custom', 'A-Custom']


def test_empty_first_line_field_round_trips() -> None:
    data = b'Package: conf\nConffiles:\n /etc/conf/a.conf 0123\n /etc/conf/b.conf 4567\n'

    block = next(tags.read_tag_file(data))

    assert tags.write_tag_file([block]) == data


def test_read_tag_file_splits_stanzas() -> None:
    data = b'Package: a\nVersion: 1\n\nPackage: b\nVersion: 2\n\n\n'

    names = [block['Package'] for block in tags.read_tag_file(data)]

    assert names == ['a', 'b']


def test_write_tag_file_without_blocks_is_empty() -> None:
    assert tags.write_tag_file([]) == b''


def test_release_file_parses_checksum_sections() -> None:
    md5 = 'd41d8cd98f00b204e9800998ecf8427e'
    sha256 = 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
    line = ' {0} {1:>16} main/binary-amd64/Packages\n'
    data = (
        'Origin: Test\n'
        'Codename: noble\n'
        'Architectures: amd64 arm64\n'
        'Components: main\n'
        'MD5Sum:\n' + line.format(md5, 0) +
        'SHA256:\n' + line.format(sha256, 0)
    ).encode('utf-8')

    release = next(tags.read_tag_file(data, tags.ReleaseFile))
    entry = release.files['main/binary-amd64/Packages']

    assert release.architectures() == ['amd64', 'arm64']
    assert release.components() == ['main']
    assert entry.size == 0
    assert entry.md5 == md5
    assert entry['SHA256'] == sha256
    assert tags.write_tag_file([release]) == data


def test_file_hash_accepts_packages_and_release_spellings() -> None:
    file_hash = tags.FileHash.from_bytes(b'', 'Packages')

    assert file_hash['MD5sum'] == file_hash['MD5Sum'] == 'd41d8cd98f00b204e9800998ecf8427e'
    assert file_hash.size == 0
