# -*- coding: utf-8 -*-
"""Location: ./toongateway/repair/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Heuristic repair of malformed JSON text.
"""

# First-Party
from toongateway.repair.pipeline import FULL_PIPELINE, normalize, NORMALIZE_PIPELINE, repair, RepairPipeline, RepairResult
from toongateway.repair.rules import RepairRule

__all__ = ["FULL_PIPELINE", "NORMALIZE_PIPELINE", "RepairPipeline", "RepairResult", "RepairRule", "normalize", "repair"]
