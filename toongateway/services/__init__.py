# -*- coding: utf-8 -*-
"""Location: ./toongateway/services/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Application services: logging, token estimation and conversion.
"""
