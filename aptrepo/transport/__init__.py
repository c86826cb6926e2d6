#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Classes that perform the IO operations for publishing APT repositories
using a consistent interface with consistent exceptions
"""

import urllib.parse

from aptrepo.config import PublishConfig

from .base import URIMismatchError, RemoteObject
from .transport import Transport


def get_transport(config: PublishConfig) -> Transport:
    """
    Gets the best Transport based on the configured URI

    :param PublishConfig config:

    :return Transport:

    :raises URIMismatchError:
    """
    from ..transports import File, S3

    url: urllib.parse.ParseResult = urllib.parse.urlparse(config.uri)

    if url.scheme == 'file' or (not url.scheme and config.uri.startswith('/')):
        return File(config.uri)

    if url.scheme == 's3':
        return S3.from_config(config)

    raise URIMismatchError('Unsupported publish target: {0}'.format(config.uri))
