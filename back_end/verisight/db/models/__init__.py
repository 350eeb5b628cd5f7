from verisight.db.models.user import User  # noqa: F401
from verisight.db.models.user_settings import UserSettings  # noqa: F401
from verisight.db.models.analysis_result import AnalysisResult  # noqa: F401
from verisight.db.models.user_vote import UserVote  # noqa: F401
