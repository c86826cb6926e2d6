#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Base class that describes an arbitrary tag-block in a APT / DPKG style
file.

The same writer is used for control files, Packages stanzas and Release
files, so field formatting only lives here.
"""

from typing import List, Dict, Optional


class TagBlock:
    """
    Base class that describes an arbitrary tag-block in a APT / DPKG style
    file.

    This class acts as if it is an ordered dict, and renders itself as a
    single RFC822 style stanza via str().

    Fields in `order_first` are written first, followed by the remaining
    fields in insertion order, then the `magic` fields (computed by
    subclasses) and finally the fields in `order_last`.
    """
    required: List[str]
    order_first: List[str]
    order_last: List[str]
    magic: List[str]
    dict: Dict[str, str]

    def __init__(self):
        self.required = []
        self.order_first = []
        self.order_last = []
        self.magic = []
        self.dict = {}

    def __contains__(self, item: str) -> bool:
        return item in self.dict

    def __getitem__(self, item: str) -> str:
        return self.dict[item]

    def __setitem__(self, key: str, value: str) -> None:
        if key in self.magic:
            raise KeyError(
                'Set on magic field {0} was not handled in class {1}'.format(
                    key, type(self).__name__
                )
            )

        if key not in self.order_first and key not in self.order_last:
            self.order_first.append(key)

        self.dict[key] = value

    def __delitem__(self, key: str) -> None:
        del self.dict[key]

    def __len__(self) -> int:
        return len(self.dict)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Gets a field, or the default if the field is not set

        :param str key:
        :param str default:
        :return str:
        """
        if key not in self.dict:
            return default

        return self.dict[key]

    def keys(self) -> List[str]:
        """
        Returns the non-magic field names in output order

        :return List[str]:
        """
        return [key for key in self.order_first if key in self.dict]

    def missing_fields(self) -> List[str]:
        """
        Returns the required fields which have no value

        :return List[str]:
        """
        return [key for key in self.required if not self.get(key)]

    def __str__(self) -> str:
        elements = []
        keys_done = []

        # Output the elements which have a fixed order
        for key in self.order_first:
            if key in keys_done:
                continue
            if key not in self.dict:
                continue

            elements.append(self._write_property(key))
            keys_done.append(key)

        # Output for fields that we have
        for key in self.dict:
            if key in keys_done:
                continue
            if key in self.order_last:
                continue

            elements.append(self._write_property(key))
            keys_done.append(key)

        # Output for fields that are 'magic'
        for key in self.magic:
            if key in keys_done:
                continue

            elements.append(self._write_property(key))
            keys_done.append(key)

        for key in self.order_last:
            if key in keys_done:
                continue
            if key not in self.dict:
                continue

            elements.append(self._write_property(key))
            keys_done.append(key)

        return '\n'.join(filter(None, elements))

    def _write_property(self, key: str) -> Optional[str]:
        value: Optional[str] = self[key]

        if value is None:
            return None

        # Continuation lines are indented by one space; an empty first line
        # (as in the checksum sections) leaves nothing after the colon
        first, *rest = value.split('\n')
        output = key + ':' + (' ' + first if first else '')

        for line in rest:
            output += '\n ' + (line if line else '.')

        return output
