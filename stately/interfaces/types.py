# stately/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Callable, Union

StateID = str
ActionName = str

# A handler is either the name of a zero-argument method on the host, or a
# callable receiving the host as its only argument.
Handler = Union[str, Callable[[Any], Any]]
CallbackHandler = Union[str, Callable[[Any], None]]
ValidationHandler = Union[str, Callable[[Any], bool]]
