from .request_parser import RequestParser, parse_variables

__all__ = ["RequestParser", "parse_variables"]
