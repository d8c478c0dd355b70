# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from bracketeer.models.event import Event  # noqa: F401
from bracketeer.models.match import EventMatch  # noqa: F401
from bracketeer.models.registration import EventRegistration  # noqa: F401
