# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""TechAcademy backend: account signup/login and contact-form relay."""

__version__ = "0.1.0"
