# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

import sys

from .main import main

sys.exit(main())
