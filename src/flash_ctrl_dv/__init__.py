#
# Flash Ctrl DV - Package
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Constrained-random stimulus generation and operation sequencing for
# flash controller verification.
#

__version__ = "0.1.0"
