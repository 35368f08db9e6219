# -*- coding: utf-8 -*-
"""Location: ./toongateway/common/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Shared data model for the TOON Gateway.
"""
