# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
jlink and jpackage invocation.

Subsystems:
  - models: the packaging config and one variant per installer format
  - packagers: jpackage argument building per variant
  - detectors: which Linux package manager the host has
  - jlink: the trimmed runtime image
"""
