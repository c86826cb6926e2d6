#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sys

from aptrepo.cli import main

sys.exit(main())
