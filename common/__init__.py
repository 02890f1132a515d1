# common/__init__.py
# -*- coding: utf-8 -*-
"""Shared helpers: command execution, logging, filesystem and network utilities."""
