# common/powershell/__init__.py
# -*- coding: utf-8 -*-
"""PowerShell host integration."""
