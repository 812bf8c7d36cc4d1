# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Notarization with xcrun notarytool, and stapling the ticket afterwards.
"""
