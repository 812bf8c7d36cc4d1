# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The step-by-step packaging pipeline and how its outcome is reported.
"""
