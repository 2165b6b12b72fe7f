# stately/core/actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Dict

# State names whose trigger action is the matching verb rather than the name itself.
ACTIONS: Dict[str, str] = {
    "completed": "complete",
    "converting": "convert",
    "invalid": "invalidate",
    "preparing": "prepare",
    "processing": "process",
    "refunded": "refund",
    "reticulating": "reticulate",
    "saving": "save",
    "searching": "search",
    "started": "start",
    "stopped": "stop",
}


def guess_action_for(name: str) -> str:
    """
    Infer the trigger action for a state name.

    :param name: The state name, in string form.
    :return: The verb form from the lookup table, or the name itself when the
        table has no entry for it.
    """
    return ACTIONS.get(name, name)
