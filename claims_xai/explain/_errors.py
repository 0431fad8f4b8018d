class ExplainerError(Exception):
    """Base class of the errors raised by the explainer."""


class InputError(ExplainerError, ValueError):
    """Invalid input: unknown covariate, empty background, malformed row, bad
    weights or out-of-range parameters."""


class ComputationError(ExplainerError, ArithmeticError):
    """The model or the metric produced a non-finite value."""
