#
# Flash Ctrl DV - Errors
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# All of these are fatal to a run. Nothing in the package retries on them.
#


class FlashDVError(Exception):
    """Base class for flash verification errors."""


class ConfigError(FlashDVError):
    """Raised when a distribution config or hardware parameter set is invalid."""


class ConstraintUnsatisfiable(FlashDVError):
    """Raised when no legal value exists within the configured policy bounds."""


class OperationTimeout(FlashDVError):
    """Raised when the controller never signals operation completion."""

    def __init__(self, op, timeout_cycles: int):
        self.op = op
        self.timeout_cycles = timeout_cycles
        super().__init__(f"{op} did not complete within {timeout_cycles} cycles")


class CheckMismatch(FlashDVError):
    """
    Raised when backdoor-verified memory disagrees with the expected result.

    This is the primary failure signal of a run: it points at a defect in the
    controller under test, not at the stimulus.
    """

    def __init__(self, op, reason: str, word_index=None, expected=None, actual=None):
        self.op = op
        self.reason = reason
        self.word_index = word_index
        self.expected = expected
        self.actual = actual
        msg = f"{op}: {reason}"
        if word_index is not None:
            exp = "X" if expected is None else f"0x{expected:08X}"
            act = "X" if actual is None else f"0x{actual:08X}"
            msg += f" (word {word_index}: expected {exp}, got {act})"
        super().__init__(msg)
