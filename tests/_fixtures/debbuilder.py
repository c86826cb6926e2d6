"""Builds minimal but valid .deb files for tests."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Dict, Optional


def _ar_member(name: str, data: bytes) -> bytes:
    header = '{0:<16}{1:<12}{2:<6}{3:<6}{4:<8}{5:<10}'.format(name, 0, 0, 0, '100644', len(data))
    member = header.encode('ascii') + b'`\n' + data

    if len(data) % 2:
        member += b'\n'

    return member


def _tar(files: Dict[str, bytes], mode: str = 'w:gz') -> bytes:
    buffer = io.BytesIO()

    with tarfile.open(fileobj=buffer, mode=mode) as archive:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))

    return buffer.getvalue()


def control_text(package: str, version: str, architecture: str, **extra: str) -> str:
    lines = [
        'Package: {0}'.format(package),
        'Version: {0}'.format(version),
        'Architecture: {0}'.format(architecture),
        'Maintainer: Test Builder <builder@example.com>',
    ]
    lines.extend('{0}: {1}'.format(key.replace('_', '-'), value) for key, value in extra.items())
    lines.append('Description: test package {0}'.format(package))
    lines.append(' A longer description of {0}.'.format(package))
    lines.append(' .')
    lines.append(' Second paragraph.')

    return '\n'.join(lines) + '\n'


def build_deb(
    package: str,
    version: str,
    architecture: str,
    control: Optional[str] = None,
    control_member: str = 'control.tar.gz',
    payload: bytes = b'hello\n',
) -> bytes:
    """Return the bytes of a .deb with the given control data."""
    if control is None:
        control = control_text(package, version, architecture)

    if control_member == 'control.tar.gz':
        control_tar = _tar({'./control': control.encode('utf-8')})
    elif control_member == 'control.tar.xz':
        control_tar = _tar({'./control': control.encode('utf-8')}, mode='w:xz')
    else:
        # Content is irrelevant for compressions the reader hands to dpkg-deb
        control_tar = b'\x28\xb5\x2f\xfd' + b'\x00' * 16

    data_tar = _tar({'./usr/share/doc/{0}/README'.format(package): payload})

    return b'!<arch>\n' + b''.join([
        _ar_member('debian-binary', b'2.0\n'),
        _ar_member(control_member, control_tar),
        _ar_member('data.tar.gz', data_tar),
    ])


class DebBuilder:
    """Writes .deb files into a directory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def write(
        self,
        package: str,
        version: str,
        architecture: str,
        filename: Optional[str] = None,
        **kwargs,
    ) -> Path:
        filename = filename or '{0}_{1}_{2}.deb'.format(package, version, architecture)
        path = self.root / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_deb(package, version, architecture, **kwargs))

        return path

    def write_raw(self, filename: str, data: bytes) -> Path:
        path = self.root / filename
        path.write_bytes(data)

        return path
