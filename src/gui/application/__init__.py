# GUI Application Layer
"""
Application layer containing:
- Route guard: Decides which view a session may see
- Auth gateway: Login, registration and logout flows
- Job filter engine: Filtered job list of the job seeker dashboard
- Operational monitor: Admin dashboard state, polling and scraper trigger
"""
from .auth_gateway import (
    AuthGateway,
    LoginResult,
    RegistrationResult,
)
from .job_filter_engine import (
    JobFilterEngine,
    JobListState,
)
from .operational_monitor import (
    MonitorSnapshot,
    OperationalMonitor,
    TriggerResult,
)

__all__ = [
    'AuthGateway',
    'LoginResult',
    'RegistrationResult',
    'JobFilterEngine',
    'JobListState',
    'MonitorSnapshot',
    'OperationalMonitor',
    'TriggerResult',
]
