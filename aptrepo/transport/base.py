#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Shared types for transports
"""

import dataclasses

from typing import Optional


class URIMismatchError(Exception):
    """
    Exception indicating that the supplied URI is not valid for the
    selected transport
    """


@dataclasses.dataclass
class RemoteObject:
    """
    An object stored on a remote, keyed relative to the repository root.

    `etag` is the hex MD5 of the content where the store provides one.
    """
    key: str
    size: int
    etag: Optional[str] = None
