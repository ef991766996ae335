# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/tools/__init__.py

"""axivip DV tools package.

Command-line tools:
- dv: Build the axivip_tb responder and run the cocotb/pyuvm bench per seed
- dv-regress: Run a YAML list of dv jobs and print a PASS/FAIL report
"""
