# -*- coding: utf-8 -*-
"""Location: ./toongateway/utils/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Shared helpers for responses, errors and request limits.
"""
