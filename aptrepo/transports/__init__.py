#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Transport implementations
"""

from .filesystem import File
from .s3 import S3
