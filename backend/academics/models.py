"""Model hub: re-exports the domain modules so Django discovers every model."""
from .domain_department import *  # noqa: F401,F403
from .domain_student import *  # noqa: F401,F403
from .domain_result import *  # noqa: F401,F403
from .domain_logs import *  # noqa: F401,F403
