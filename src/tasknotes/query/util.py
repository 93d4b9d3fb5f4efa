# SPDX-License-Identifier: MIT


def split_instruction(instruction_value: str) -> tuple[str, str]:
    """Split ``"before 2025-01-15"`` into ``("before", "2025-01-15")``."""
    stripped = instruction_value.strip()
    instruction = stripped.split(" ")[0].strip()
    value = stripped[len(instruction) :].strip()

    return instruction, value
