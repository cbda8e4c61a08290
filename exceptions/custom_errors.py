class MalformedInputError(Exception):
    """Raised when the task pool, constraints, blocked intervals or intent are structurally invalid, before any scheduling logic runs."""

    pass


class SynthesisInvariantViolation(Exception):
    """Raised when a constructed schedule fails its own hard-rule check. This is a logic error, never a normal outcome."""

    def __init__(self, message: str, violations=None):
        super().__init__(message)
        self.violations = list(violations or [])


class NoFeasibleSolutionError(Exception):
    """Raised when the CP-SAT repair model returns neither an optimal nor a feasible solution."""

    pass


# Mapping of custom exceptions to HTTP status codes
CUSTOM_ERRORS = {
    MalformedInputError: 400,
    NoFeasibleSolutionError: 422,
    SynthesisInvariantViolation: 500,
}
