from services.exceptions import AuthError, InsightsError, NoDataError, ParseError, UpstreamError

__all__ = ["AuthError", "InsightsError", "NoDataError", "ParseError", "UpstreamError"]
