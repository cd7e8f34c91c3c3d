"""
icsgen errors.

Two disjoint categories:
  - FormatError: the data cannot be written (illegal character for the active
    grammar, or the sink failed). The caller may drop the line and carry on.
  - ContractViolation: the caller used the writers wrongly (wrong call order,
    write after close, missing close). Always a bug, never data-dependent.
"""


class FormatError(ValueError):
    """Text could not be written as iCalendar content."""


class ContractViolation(AssertionError):
    """A writer was driven outside its call protocol.

    Raised explicitly rather than with ``assert`` so that running under
    ``python -O`` does not disable the checks.
    """
