#!/usr/bin/env python3


class UserInputError(Exception):
    """
    Problem with the input data that the user has to fix
    """


class BadInputError(UserInputError):
    pass


class IncompatibleDictionaryError(UserInputError):
    def __init__(self, message, name_1, dictionary_1, name_2, dictionary_2):
        def _describe(dictionary):
            if dictionary is None:
                return "none"
            return ", ".join(f"{n}:{l}" for n, l in dictionary.items())
        super().__init__(f"{message}\n  {name_1}: {_describe(dictionary_1)}\n"
                         f"  {name_2}: {_describe(dictionary_2)}")


class BreakpointMateError(RuntimeError):
    """
    Two breakpoints refer to each other as mates but their ids disagree
    """
