# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

from packwright.cli.main import main

main()
