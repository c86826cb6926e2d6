#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Classes for handling APT/DPKG Style tag files.

Tag files can be read from a block of bytes, and written by joining the
str() of each TagBlock with blank lines.
Subclasses are provided to add extra logic and validation.
"""

import typing

from .filehash import FileHash
from .tagblock import TagBlock
from .releasefile import ReleaseFile


def read_tag_file(data: bytes, template: typing.Callable[[], TagBlock] = TagBlock)\
        -> typing.Generator[TagBlock, None, None]:
    """
    Loads in a list of TagBlocks from a data block.

    Continuation lines keep their content (minus the single leading space)
    so that a block read and written again is unchanged.

    :param bytes data:
    :param callable template:
    :return:

    :raises ValueError: If a line is neither a field nor a continuation
    """
    tags: TagBlock = template()
    key = None

    for line in data.decode('utf-8').split('\n'):
        line = line.rstrip()

        if not line:
            if len(tags) > 0 or key:
                yield tags

            tags = template()
            key = None
            continue

        if line[0] in ' \t':
            if not key:
                continue

            tags[key] = tags[key] + '\n' + line[1:] if key in tags else '\n' + line[1:]

        else:
            if ':' not in line:
                raise ValueError('Malformed field line: {0!r}'.format(line))

            [key, value] = line.split(':', 1)
            tags[key] = value.strip()

    if len(tags) > 0 or key:
        yield tags


def write_tag_file(blocks: typing.Iterable[TagBlock]) -> bytes:
    """
    Serialises TagBlocks into a tag file, one stanza per block separated by
    blank lines. No blocks gives an empty file.

    :param Iterable[TagBlock] blocks:
    :return bytes:
    """
    stanzas = [str(block) for block in blocks]

    if not stanzas:
        return b''

    return ('\n\n'.join(stanzas) + '\n').encode('utf-8')
