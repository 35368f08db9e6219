# -*- coding: utf-8 -*-
"""Location: ./toongateway/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

TOON Gateway: JSON repair, JSON to TOON conversion and token accounting.
"""

__author__ = "TOON Gateway Contributors"
__copyright__ = "Copyright 2025"
__license__ = "Apache 2.0"
__version__ = "0.4.0"
__description__ = "JSON to TOON conversion service with heuristic JSON repair and token savings reports"
__packages__ = ("toongateway",)
