#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
OpenPGP signing of repository metadata, via python-gnupg.

The rest of the package only relies on the narrow `sign` and
`export_public_key` methods, so a different implementation can be
substituted without touching the assembly logic.
"""

import logging

from typing import Optional
from gnupg import GPG

from aptrepo.exceptions import SigningError

logger = logging.getLogger(__name__)


class Signer:
    """
    Wrapper for gnupg's `GPG` class that turns every failure into a
    :class:SigningError.

    The key is looked up lazily on first use, so constructing a Signer
    never touches gpg.
    """
    key_id: str
    passphrase: Optional[str]
    _gpg: Optional[GPG] = None

    def __init__(self, key_id: str, gnupghome: Optional[str] = None,
                 passphrase: Optional[str] = None, gpg: Optional[GPG] = None):
        self.key_id = key_id
        self.gnupghome = gnupghome
        self.passphrase = passphrase
        self._gpg = gpg
        self._checked = False

    @property
    def gpg(self) -> GPG:
        """
        The GPG context, created on first use

        :raises SigningError: If gpg cannot be started
        """
        if self._gpg is None:
            try:
                self._gpg = GPG(gnupghome=self.gnupghome)
            except (OSError, ValueError) as ex:
                raise SigningError(self.key_id, 'unable to start gpg: {0}'.format(ex)) from ex

        return self._gpg

    def _assert_key_exists(self) -> None:
        if self._checked:
            return

        keys = self.gpg.list_keys(secret=True, keys=self.key_id)

        if not keys:
            raise SigningError(self.key_id, 'secret key not found')

        self._checked = True

    def sign(self, data: bytes, detach: bool) -> bytes:
        """
        Signs a block of data with the configured key.

        :param bytes data:
        :param bool detach: True for an armored detached signature,
            False for a clearsigned copy of the data

        :return bytes: The armored output

        :raises SigningError:
        """
        self._assert_key_exists()

        logger.debug('Signing %d bytes with %s (detached = %s)', len(data), self.key_id, detach)

        result = self.gpg.sign(
            data,
            keyid=self.key_id,
            passphrase=self.passphrase,
            detach=detach,
            clearsign=not detach,
            extra_args=['--batch', '--pinentry-mode', 'loopback', '--digest-algo', 'SHA512'],
        )

        if not result or not result.data:
            reason = getattr(result, 'status', None) or 'no signature produced'
            raise SigningError(self.key_id, str(reason))

        return result.data

    def export_public_key(self) -> str:
        """
        Exports the ASCII armored public key

        :return str:

        :raises SigningError:
        """
        self._assert_key_exists()

        key_text = self.gpg.export_keys(self.key_id, armor=True)

        if not key_text:
            raise SigningError(self.key_id, 'public key export was empty')

        return key_text

    def __repr__(self) -> str:
        return '<aptrepo.signing.Signer {0}>'.format(self.key_id)
