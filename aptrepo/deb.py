#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Utilities for reading the control data of debian archives
"""

import io
import re
import struct
import tarfile
import subprocess
import dataclasses
import logging

from typing import Optional, IO, Callable

from aptrepo import tags
from aptrepo.exceptions import MetadataExtractionError

logger = logging.getLogger(__name__)

# 0   16  File name                       ASCII
# 16  12  File modification timestamp     Decimal
# 28  6   Owner ID                        Decimal
# 34  6   Group ID                        Decimal
# 40  8   File mode                       Octal
# 48  10  File size in bytes              Decimal
# 58  2   File magic                      0x60 0x0A

ArchiveHeader = struct.Struct('16s12s6s6s8s10s2s')

REQUIRED_FIELDS = ['Package', 'Version', 'Architecture']

# Debian policy 5.6.7: lower case alphanumerics and + - ., at least two long
PACKAGE_NAME = re.compile(r'[a-z0-9][a-z0-9+.-]+')

DPKG_DEB_TIMEOUT = 60.0

# Compression suffixes of control.tar.* members the tarfile module can open
_NATIVE_SUFFIXES = (b'', b'.gz', b'.xz', b'.bz2')

ControlExtractor = Callable[[str], tags.TagBlock]


@dataclasses.dataclass(init=False, eq=False)
class ARRecord:
    """
    Header record for files in an AR-Archive
    """

    name: bytes
    modified: int
    owner: int
    group: int
    mode: int
    size: int

    # pylint: disable=R0913
    def __init__(
            self,
            name: bytes, modified: bytes,
            owner: bytes, group: bytes, mode: bytes,
            size: bytes, magic: bytes
    ):
        if magic != b'\x60\n':
            raise ValueError("Invalid file signature")

        self.name = name.rstrip(b' ').rstrip(b'/')
        self.modified = int(modified.strip() or b'0', 10)
        self.owner = int(owner.strip() or b'0', 10)
        self.group = int(group.strip() or b'0', 10)
        self.mode = int(mode.strip() or b'0', 8)
        self.size = int(size, 10)


def _consume_ar_header(deb: IO) -> bool:
    # The ar-format starts with 8 magic bytes
    data = deb.read(8)

    return data == b'!<arch>\n'


def _read_file_header(deb: IO) -> Optional[ARRecord]:
    data: bytes = deb.read(60)

    if len(data) != 60:
        return None

    return ARRecord(*ArchiveHeader.unpack(data))


def _read_file(deb: IO, file: ARRecord) -> bytes:
    data: bytes = deb.read(file.size)

    if len(data) != file.size:
        raise ValueError("Archive member {0!r} is truncated".format(file.name.decode('ascii', 'replace')))

    if file.size % 2 != 0:
        deb.read(1)

    return data


def _control_block() -> tags.TagBlock:
    block = tags.TagBlock()
    block.required.extend(REQUIRED_FIELDS)

    return block


def _parse_control(data: bytes) -> tags.TagBlock:
    control = next(tags.read_tag_file(data, _control_block), None)

    if control is None:
        raise ValueError("Control file is empty")

    missing = control.missing_fields()

    if missing:
        raise ValueError("Control file lacks required field(s) {0}".format(', '.join(missing)))

    if not PACKAGE_NAME.fullmatch(control['Package']):
        raise ValueError("Invalid package name {0!r}".format(control['Package']))

    return control


def extract_control_file(deb: IO) -> Optional[tags.TagBlock]:
    """
    Extracts the control file from inside a debian package stream.

    Returns None if the control member uses a compression the tarfile
    module cannot read (e.g. zstd), so that the caller can fall back to
    dpkg-deb.

    :param IO deb: A seekable binary stream

    :return TagBlock:

    :raises ValueError: If the stream is not a valid debian archive
    """
    deb.seek(0)

    if not _consume_ar_header(deb):
        raise ValueError("Stream is not a valid debian archive")

    file = _read_file_header(deb)

    if file is None or file.name != b'debian-binary':
        raise ValueError("Archive does not start with debian-binary file")

    buffer = _read_file(deb, file)

    if not buffer.startswith(b'2.'):
        raise ValueError("Archive does not have debian-binary version 2.x")

    file = _read_file_header(deb)

    if file is None or not file.name.startswith(b'control.tar'):
        raise ValueError("Archive does not have control.tar.*")

    if file.name[len(b'control.tar'):] not in _NATIVE_SUFFIXES:
        return None

    control_data: bytes = _read_file(deb, file)

    try:
        with io.BytesIO(control_data) as control_io:
            with tarfile.open(fileobj=control_io, mode='r:*') as data:
                for name in data.getnames():
                    if name not in ['./control', 'control']:
                        continue

                    control = data.extractfile(name)
                    return _parse_control(control.read())
    except tarfile.TarError as ex:
        raise ValueError("Unable to read control.tar: {0}".format(ex)) from ex

    raise ValueError("Archive's control.tar.* does not contain a control file")


def _dpkg_deb_fields(path: str, timeout: float) -> tags.TagBlock:
    try:
        result = subprocess.run(
            ['dpkg-deb', '--field', path],
            stdout=subprocess.PIPE, stderr=subprocess.PIPE,
            timeout=timeout, check=False
        )
    except FileNotFoundError as ex:
        raise MetadataExtractionError(path, 'dpkg-deb is not installed') from ex
    except subprocess.TimeoutExpired as ex:
        raise MetadataExtractionError(path, 'dpkg-deb timed out after {0}s'.format(timeout)) from ex

    if result.returncode != 0:
        raise MetadataExtractionError(path, result.stderr.decode('utf-8', 'replace').strip())

    try:
        return _parse_control(result.stdout)
    except ValueError as ex:
        raise MetadataExtractionError(path, str(ex)) from ex


def extract_control_fields(path: str, timeout: float = DPKG_DEB_TIMEOUT) -> tags.TagBlock:
    """
    Reads the control fields of the .deb at `path`.

    The archive is parsed natively; control members the standard library
    cannot decompress are handed to `dpkg-deb --field` instead.

    :param str path:
    :param float timeout: Limit for the dpkg-deb fallback, in seconds

    :return TagBlock: The control fields, in the order of the control file

    :raises MetadataExtractionError:
    """
    try:
        with open(path, 'rb') as deb:
            control = extract_control_file(deb)
    except (OSError, ValueError, struct.error) as ex:
        raise MetadataExtractionError(path, str(ex)) from ex

    if control is None:
        logger.debug('Falling back to dpkg-deb for %s', path)
        control = _dpkg_deb_fields(path, timeout)

    return control
