"""
Shared module for code used by the REST API and the kitchen display.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Order statuses, payment methods, event kinds, limits

- shared.infrastructure: Database and live order notifications
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: Request correlation IDs
  - events/: Typed live order events and the Publisher Registry

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - schemas.py: Shared Pydantic schemas
  - eta.py: Kitchen ETA estimate

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, safe_commit
    from shared.infrastructure.events import PublisherRegistry, OrderUpdatedEvent
    from shared.config.settings import settings
    from shared.config.constants import OrderStatus, KITCHEN_STATUSES
    from shared.utils.exceptions import NotFoundError, ValidationError
"""
