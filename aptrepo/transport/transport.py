#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Abstract Transport
"""

import abc
import typing

from .base import RemoteObject


class Transport(abc.ABC):
    """
    Abstract class for writing a repository tree to a remote store.

    Keys are '/' separated paths relative to the repository root.
    """

    @abc.abstractmethod
    def list_objects(self) -> typing.Dict[str, RemoteObject]:
        """
        Returns every object currently on the remote

        :return Dict[str, RemoteObject]: Objects by key

        :raises UploadError:
        """

    @abc.abstractmethod
    def upload(self, source: str, key: str, content_type: str) -> None:
        """
        Uploads a local file, replacing any existing object

        :param str source: Local path of the file
        :param str key:
        :param str content_type: The MIME type to store with the object

        :raises UploadError:
        """

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """
        Deletes an object from the remote

        :param str key:

        :raises UploadError:
        """
