# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
packwright: turns a modular Java application into a native installer.

One pipeline per host OS: an MSI on Windows, an app image plus zip and a
deb or rpm on Linux, a signed and notarized DMG on macOS.
"""

__version__ = "0.1.0"
