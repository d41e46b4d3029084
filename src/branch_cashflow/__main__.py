# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

from .cli import main

main()
