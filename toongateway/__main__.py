# -*- coding: utf-8 -*-
"""Location: ./toongateway/__main__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Allow ``python -m toongateway``.
"""

# Standard
import sys

# First-Party
from toongateway.cli import main

sys.exit(main())
