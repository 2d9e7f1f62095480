"""SQLAlchemy 2.0 ORM models for BuildAura.

Import all models here so ``Base.metadata`` knows every table::

    from buildaura.models.db import Base  # noqa: F401

Every model must be imported at module level to register with the
``DeclarativeBase`` metadata.
"""

from buildaura.models.db.base import Base, TimestampMixin  # noqa: F401

from buildaura.models.db.prompt_history import PromptHistory  # noqa: F401
from buildaura.models.db.business_idea import BusinessIdea  # noqa: F401
from buildaura.models.db.business_plan import BusinessPlan  # noqa: F401
from buildaura.models.db.launch_asset import LaunchAsset  # noqa: F401
from buildaura.models.db.user_task import UserTask  # noqa: F401
