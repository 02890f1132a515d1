# settings/__init__.py
# -*- coding: utf-8 -*-
"""
Configuration package for the WinGet bootstrapper.

Static constants live in `settings.config`, the validated runtime settings
model in `settings.config_models` and the layered loader (defaults, env,
YAML, CLI) in `settings.config_loader`.
"""
