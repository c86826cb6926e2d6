#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Assembly, signing and publishing of APT repositories.

The repository itself is modelled in aptrepo.repo, the tag file format in
aptrepo.tags, and publishing in aptrepo.publish and aptrepo.transport.
"""

__version__ = '0.1.0'
