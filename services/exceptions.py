class InsightsError(Exception):
    """Base for insight pipeline errors."""


class AuthError(InsightsError):
    """No caller identity could be resolved."""


class NoDataError(InsightsError):
    """The profile has no completed rounds to analyse."""


class UpstreamError(InsightsError):
    """The generative model was unreachable or answered with an error."""


class ParseError(InsightsError):
    """The model answer held no parseable insight JSON. Recovered locally."""
