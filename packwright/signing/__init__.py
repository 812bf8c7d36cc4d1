# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
macOS code signing: recursive bundle signing, DMG signing and the
entitlements shipped with the package.
"""
