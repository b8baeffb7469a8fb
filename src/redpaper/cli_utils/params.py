"""
redpaper parameter types

Custom click parameter types for the redpaper commands.
"""

import click

from redpaper.config import parse_number


class NumberOrFraction(click.ParamType):
    """
    A float that may also be written as a fraction, e.g. --min-ratio 16/9.
    """

    name = "number"

    def convert(self, value, param, ctx):
        if isinstance(value, float):
            return value

        try:
            return parse_number(value)
        except ValueError as error:
            self.fail(str(error), param, ctx)


NUMBER_OR_FRACTION = NumberOrFraction()
