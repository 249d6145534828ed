from .query_string import object_to_query_param_string
from .redact import redact

__all__ = [
    "object_to_query_param_string",
    "redact",
]
